"""Path emission and SVG document generation."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from .types import ColorKey, PathData, ProcessingResult


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float

    def render(self) -> str:
        return f"M {format_number(self.x)} {format_number(self.y)}"


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float

    def render(self) -> str:
        return f"L {format_number(self.x)} {format_number(self.y)}"


@dataclass(frozen=True)
class ClosePath:
    def render(self) -> str:
        return "Z"


PathCommand = Union[MoveTo, LineTo, ClosePath]


def format_number(x: float, precision: int = 2) -> str:
    """
    Format number with given precision.

    Args:
        x: Number to format
        precision: Decimal places

    Returns:
        Formatted string without trailing zeros
    """
    formatted = f"{x:.{precision}f}"
    # Remove trailing zeros and decimal point if not needed
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    if formatted == "-0":
        formatted = "0"
    return formatted


def format_rgb(color: ColorKey) -> str:
    """Format an RGB triple as a CSS rgb() string, clamped to 0-255."""
    r, g, b = [format_number(min(255.0, max(0.0, float(c)))) for c in color[:3]]
    return f"rgb({r}, {g}, {b})"


def color_to_hex(color: Sequence[float]) -> str:
    """Convert an RGB(A) tuple with 0-255 channels to #RRGGBB (alpha ignored)."""
    r, g, b = [int(round(min(255.0, max(0.0, float(c))))) for c in color[:3]]
    return f"#{r:02X}{g:02X}{b:02X}"


def points_to_commands(points: Sequence[Tuple[float, float]]) -> List[PathCommand]:
    """Build a closed polygon command list from an ordered point sequence.

    Sequences with fewer than two points produce no commands.
    """
    if len(points) < 2:
        return []

    commands: List[PathCommand] = [MoveTo(*points[0][:2])]
    commands.extend(LineTo(*p[:2]) for p in points[1:])
    commands.append(ClosePath())
    return commands


def render_commands(commands: Sequence[PathCommand]) -> PathData:
    """Render typed path commands as SVG path data."""
    return " ".join(cmd.render() for cmd in commands)


def points_to_path(points: Sequence[Tuple[float, float]]) -> PathData:
    """Convert an ordered point sequence to closed SVG path data.

    Returns an empty string for fewer than two points.
    """
    return render_commands(points_to_commands(points))


def layers_to_svg(result: ProcessingResult) -> str:
    """
    Generate an SVG document from a processing result.

    Each layer path becomes one filled <path> element, drawn in layer order.

    Args:
        result: Processing result with width/height metadata

    Returns:
        Complete SVG string
    """
    width = result.metadata.get("width", 0)
    height = result.metadata.get("height", 0)

    path_elements = []
    for layer in result.layers:
        for path in layer.paths:
            if path:
                path_elements.append(f'<path d="{path}" fill="{layer.color}"/>')

    svg_content = '\n  '.join(path_elements)

    return f'''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}" width="{width}" height="{height}">
  {svg_content}
</svg>'''


def save_svg(svg_string: str, output_path: Union[str, Path]) -> None:
    """
    Save SVG string to file.

    Args:
        svg_string: SVG content
        output_path: Output file path
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(svg_string)
