from .base import BaseExporter
from .stream_exporter import SUPPORTED_FORMATS, StreamExporter

__all__ = ["BaseExporter", "StreamExporter", "SUPPORTED_FORMATS"]
