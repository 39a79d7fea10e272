from clipvault.utils.classifier import classify

__all__ = ["classify"]
