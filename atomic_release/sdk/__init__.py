"""Command, saga executor and strategy building blocks."""

from .command import Command
from .saga import Saga, SagaState
from .strategy import Strategy

__all__ = [
    "Command",
    "Saga",
    "SagaState",
    "Strategy",
]
