from .clear_duplicate_children import build_pipeline, run

__all__ = ["build_pipeline", "run"]
