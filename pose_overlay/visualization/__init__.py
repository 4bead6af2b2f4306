from .surface import OverlaySurface, Path
from .templates import PaintMode, TemplateRenderer, SHAPES
from .status import StatusRenderer
from .display import FramePacer, WindowDisplay
