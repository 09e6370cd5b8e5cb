"""Text preprocessing."""

from .text_preprocessor import TextPreprocessor

__all__ = ['TextPreprocessor']
