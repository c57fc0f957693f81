"""Export layer — output files, graph diagnostics and stylesheets."""

from vellum.export.writer import OutputWriter, WriteResult, WrittenFile

__all__ = ["OutputWriter", "WriteResult", "WrittenFile"]
