"""
PDF Pipeline Custom Exceptions
"""

from pathlib import Path
from typing import Optional, Union


class PdfPipelineError(Exception):
    """Base exception for the PDF rendering pipeline"""
    pass


class InvalidRequestError(PdfPipelineError):
    """Request is missing mandatory fields"""
    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Missing required field: {field}")


class TemplateNotFoundError(PdfPipelineError):
    """Markup source for a slot does not exist"""
    def __init__(self, source: str, slot: Optional[str] = None):
        self.source = source
        self.slot = slot
        where = f" (slot '{slot}')" if slot else ""
        super().__init__(f"Template not found: {source}{where}")


class TemplateCompileError(PdfPipelineError):
    """Markup failed to compile or bind against the request data"""
    def __init__(self, source: str, detail: str, slot: Optional[str] = None):
        self.source = source
        self.slot = slot
        self.detail = detail
        where = f" (slot '{slot}')" if slot else ""
        super().__init__(f"Template {source}{where} failed to render: {detail}")


class FontLoadError(PdfPipelineError):
    """A single font variant could not be read. Never fatal for a render."""
    def __init__(self, family: str, path: Union[str, Path], reason: str = ""):
        self.family = family
        self.path = Path(path)
        super().__init__(f"Font '{family}' variant unreadable: {self.path.name} {reason}".rstrip())


class RenderEngineUnavailableError(PdfPipelineError):
    """The headless browser could not be launched or reached"""
    pass


class ArtifactWriteError(PdfPipelineError):
    """The PDF artifact could not be written to disk"""
    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        super().__init__(f"Failed to write PDF artifact {self.path.name}: {reason}")


class RenderTimeoutError(PdfPipelineError):
    """Caller stopped waiting for a render; the render finishes in the background"""
    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"PDF render did not complete within {timeout:g}s")
