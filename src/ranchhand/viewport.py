"""Pan/zoom transform for the interactive map.

Screen coordinates are pixels relative to the map container's top-left
corner. Image coordinates are pixels on the fixed reference image. The
transform between them is a uniform scale plus a translation:

    sx = ix * scale + pan_x
    sy = iy * scale + pan_y
"""

from dataclasses import dataclass
from enum import Enum

from . import config


class OutOfBounds:
    """Result of mapping a screen point that lies off the image."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OUT_OF_BOUNDS"

    def __bool__(self) -> bool:
        return False


OUT_OF_BOUNDS = OutOfBounds()


@dataclass(frozen=True)
class ViewState:
    scale: float
    pan_x: float
    pan_y: float


@dataclass(frozen=True)
class ImagePercent:
    """A position as a percentage of the reference image's width and height."""

    x_pct: float
    y_pct: float


class GestureKind(str, Enum):
    NONE = "none"
    PAN = "pan"
    PLACE = "place"
    SELECT = "select"


@dataclass(frozen=True)
class GestureOutcome:
    kind: GestureKind
    point: ImagePercent | None = None
    pin_id: str | None = None


@dataclass
class _Gesture:
    start_x: float
    start_y: float
    pan_x: float
    pan_y: float
    pin_id: str | None = None
    dragging: bool = False


def fit_to_container(
    container_width: float,
    container_height: float,
    image_width: float = config.MAP_IMAGE_WIDTH,
    image_height: float = config.MAP_IMAGE_HEIGHT,
) -> ViewState:
    """Largest scale at which the whole image fits, centred in the container."""
    scale = min(container_width / image_width, container_height / image_height)
    return ViewState(
        scale=scale,
        pan_x=(container_width - image_width * scale) / 2,
        pan_y=(container_height - image_height * scale) / 2,
    )


class MapViewport:
    """
    Viewport state for one map session.

    Scale stays within [fit_scale, max_scale], where fit_scale is the
    fit-to-container scale for the current container size.
    """

    def __init__(
        self,
        container_width: float,
        container_height: float,
        image_width: float = config.MAP_IMAGE_WIDTH,
        image_height: float = config.MAP_IMAGE_HEIGHT,
        max_scale: float = config.MAX_ZOOM,
        drag_threshold: float = config.DRAG_THRESHOLD,
        read_only: bool = False,
    ):
        if container_width <= 0 or container_height <= 0:
            raise ValueError("container dimensions must be positive")
        self.image_width = image_width
        self.image_height = image_height
        self.max_scale = max_scale
        self.drag_threshold = drag_threshold
        self.read_only = read_only

        self._gesture: _Gesture | None = None
        self.fit_to_container(container_width, container_height)

    # --- View ---

    @property
    def state(self) -> ViewState:
        return ViewState(self.scale, self.pan_x, self.pan_y)

    @property
    def zoom_percent(self) -> int:
        """Zoom relative to the fit view (fit = 100)."""
        return round(self.scale / self.fit_scale * 100)

    def fit_to_container(self, container_width: float, container_height: float) -> ViewState:
        """Size the viewport to a container and show the whole image."""
        self.container_width = container_width
        self.container_height = container_height
        fit = fit_to_container(
            container_width, container_height, self.image_width, self.image_height
        )
        self.fit_scale = fit.scale
        self.scale, self.pan_x, self.pan_y = fit.scale, fit.pan_x, fit.pan_y
        return fit

    def reset_view(self) -> ViewState:
        return self.fit_to_container(self.container_width, self.container_height)

    def resize(self, container_width: float, container_height: float) -> None:
        """
        Track a container resize.

        The zoom floor moves with the container; if the current scale is now
        below it, the view snaps back to fit.
        """
        self.container_width = container_width
        self.container_height = container_height
        self.fit_scale = fit_to_container(
            container_width, container_height, self.image_width, self.image_height
        ).scale
        if self.scale < self.fit_scale:
            self.reset_view()

    def zoom_at(self, sx: float, sy: float, direction: int, step: float) -> bool:
        """
        Zoom by direction * step, keeping the image point under (sx, sy) fixed.

        Returns False if the scale was already at its limit.
        """
        new_scale = min(self.max_scale, max(self.fit_scale, self.scale + direction * step))
        if new_scale == self.scale:
            return False

        ix, iy = self.screen_to_image(sx, sy)
        self.pan_x = sx - ix * new_scale
        self.pan_y = sy - iy * new_scale
        self.scale = new_scale
        return True

    def zoom_button(self, direction: int) -> bool:
        """Step zoom toward the container centre."""
        return self.zoom_at(
            self.container_width / 2, self.container_height / 2, direction, config.ZOOM_STEP
        )

    def wheel(self, sx: float, sy: float, delta_y: float) -> bool:
        """Wheel zoom toward the cursor. Scrolling up (negative delta) zooms in."""
        direction = 1 if delta_y < 0 else -1
        return self.zoom_at(sx, sy, direction, config.ZOOM_WHEEL_STEP)

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    # --- Coordinates ---

    def screen_to_image(self, sx: float, sy: float) -> tuple[float, float]:
        return (sx - self.pan_x) / self.scale, (sy - self.pan_y) / self.scale

    def image_to_screen(self, ix: float, iy: float) -> tuple[float, float]:
        return ix * self.scale + self.pan_x, iy * self.scale + self.pan_y

    def screen_to_image_percent(self, sx: float, sy: float) -> ImagePercent | OutOfBounds:
        """Map a screen point to image percentages, or OUT_OF_BOUNDS if it's off the image."""
        ix, iy = self.screen_to_image(sx, sy)
        x_pct = ix / self.image_width * 100
        y_pct = iy / self.image_height * 100
        if x_pct < 0 or x_pct > 100 or y_pct < 0 or y_pct > 100:
            return OUT_OF_BOUNDS
        return ImagePercent(x_pct, y_pct)

    def percent_to_screen(self, x_pct: float, y_pct: float) -> tuple[float, float]:
        """Where a stored pin should be drawn."""
        return self.image_to_screen(
            x_pct / 100 * self.image_width, y_pct / 100 * self.image_height
        )

    # --- Gestures ---

    def pointer_down(self, x: float, y: float, pin_id: str | None = None) -> None:
        """Start a gesture. pin_id is set when the press lands on an existing pin."""
        self._gesture = _Gesture(
            start_x=x, start_y=y, pan_x=self.pan_x, pan_y=self.pan_y, pin_id=pin_id
        )

    def pointer_move(self, x: float, y: float) -> None:
        gesture = self._gesture
        if gesture is None:
            return
        dx = x - gesture.start_x
        dy = y - gesture.start_y
        if abs(dx) > self.drag_threshold or abs(dy) > self.drag_threshold:
            gesture.dragging = True
        if gesture.dragging:
            self.pan_x = gesture.pan_x + dx
            self.pan_y = gesture.pan_y + dy

    def pointer_up(self, x: float, y: float) -> GestureOutcome:
        """
        Finish a gesture and say what it was.

        A gesture that ever moved past the drag threshold is a pan and never
        places or selects anything.
        """
        gesture = self._gesture
        if gesture is None:
            return GestureOutcome(GestureKind.NONE)
        # The release point counts toward the displacement
        self.pointer_move(x, y)
        self._gesture = None

        if gesture.dragging:
            return GestureOutcome(GestureKind.PAN)

        if gesture.pin_id is not None:
            return GestureOutcome(GestureKind.SELECT, pin_id=gesture.pin_id)

        if self.read_only:
            return GestureOutcome(GestureKind.NONE)

        point = self.screen_to_image_percent(x, y)
        if point is OUT_OF_BOUNDS:
            return GestureOutcome(GestureKind.NONE)
        return GestureOutcome(GestureKind.PLACE, point=point)

    def cancel_gesture(self) -> None:
        self._gesture = None
