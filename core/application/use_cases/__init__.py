"""Application use cases."""
from .post_order import PostOrderRequest, PostOrderResponse, PostOrderUseCase

__all__ = [
    "PostOrderRequest",
    "PostOrderResponse",
    "PostOrderUseCase",
]
