"""
Main application module for the Mandelbrot explorer.

Contains the MandelscopeApp class which handles:
- Window setup and main loop
- User input (zoom, center, reset, palette and iteration changes)
- Turning finished frames into pygame surfaces
- Keeping the last good frame when a generation fails
"""

import logging
import time
from dataclasses import replace

import pygame

from .config import Config, DrawSettings
from .compute import warmup_jit
from .palette import ColorScheme, colorize, palette_preview
from .renderer import MandelbrotRenderer
from .transform import CoordinateTransform

logger = logging.getLogger(__name__)


class MandelscopeApp:
    """
    Main application class for the Mandelbrot explorer.

    Handles the pygame window and event loop and coordinates the
    transform, the background renderer and the display.

    Controls:
        +/-: Zoom in/out around the window center
        Space: Reset view and iteration budget
        Left click: Center on the clicked point
        Right click: Log coordinates and iterations under the cursor
        PageUp/PageDown: Double/halve the iteration budget
        1-4: Color scheme
        H: Toggle histogram-equalized coloring
        C: Toggle palette preview
        ESC: Quit
    """

    ZOOM_IN_FACTOR = 2.0
    ZOOM_OUT_FACTOR = 0.5
    ITERATIONS_UP_FACTOR = 2.0
    ITERATIONS_DOWN_FACTOR = 0.5

    SCHEME_KEYS = {
        pygame.K_1: ColorScheme.GREEN,
        pygame.K_2: ColorScheme.RAINBOW,
        pygame.K_3: ColorScheme.REDISH,
        pygame.K_4: ColorScheme.BLUE,
    }
    ZOOM_IN_KEYS = (pygame.K_PLUS, pygame.K_KP_PLUS, pygame.K_EQUALS)
    ZOOM_OUT_KEYS = (pygame.K_MINUS, pygame.K_KP_MINUS)

    CAPTION = "Mandelscope - +/- zoom, click to center, space to reset"

    def __init__(self, config=None):
        """
        Initialize the application state. Nothing is opened until run().

        Args:
            config: Config instance (default: Config())
        """
        self.config = config or Config()
        self.width = self.config.width
        self.height = self.config.height
        self.max_iterations = self.config.max_iterations

        self.transform = CoordinateTransform((self.width, self.height))
        self.settings = DrawSettings(
            use_histogram=self.config.use_histogram,
            color_scheme=self.config.color_scheme,
        )

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None
        self.renderer = None

        # Display state
        self.image = None               # last good ImageBuffer
        self.image_transform = None     # view self.image was generated with
        self.frame_surface = None
        self.preview_surface = None
        self.last_error = None

        # Flags set by input handlers, consumed by the main loop
        self.update_image = True
        self.update_texture = False

        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._init_components()
        try:
            self._warmup_and_initial_render()

            self.running = True
            while self.running:
                self._handle_events()
                self._check_render_result()
                self._maybe_start_render()
                self._maybe_update_texture()
                self._draw()
                self.clock.tick(60)
        finally:
            self.renderer.close()
            pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        pygame.display.set_caption(self.CAPTION)
        self.clock = pygame.time.Clock()
        logger.info("Window size %dx%d", self.width, self.height)

    def _init_components(self):
        """Create the renderer and the palette preview."""
        self.renderer = MandelbrotRenderer(workers=self.config.resolved_workers())
        self._build_preview()

    def _build_preview(self):
        rgb = palette_preview(self.width, self.height)
        self.preview_surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))

    def _warmup_and_initial_render(self):
        """Compile the kernels and render the first frame synchronously."""
        pygame.display.set_caption("Compiling (first run only)...")
        warmup_jit()
        result = self.renderer.render(self.transform.snapshot(), self.max_iterations)
        self._apply_result(result)
        self.update_image = False

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN:
                self.handle_click(event.button, event.pos)
            elif event.type == pygame.VIDEORESIZE:
                self._handle_resize(event.w, event.h)

    def handle_key(self, key):
        """Apply a key press to the view and draw settings."""
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key in self.ZOOM_IN_KEYS:
            self.transform.zoom(self.ZOOM_IN_FACTOR)
            self.update_image = True
        elif key in self.ZOOM_OUT_KEYS:
            self.transform.zoom(self.ZOOM_OUT_FACTOR)
            self.update_image = True
        elif key == pygame.K_SPACE:
            self.transform.reset()
            self.max_iterations = self.config.max_iterations
            self.update_image = True
        elif key == pygame.K_h:
            self.settings = replace(self.settings, use_histogram=not self.settings.use_histogram)
            self.update_texture = True
        elif key == pygame.K_c:
            self.settings = replace(self.settings, show_colors=not self.settings.show_colors)
        elif key == pygame.K_PAGEUP:
            self.change_iterations(self.ITERATIONS_UP_FACTOR)
        elif key == pygame.K_PAGEDOWN:
            self.change_iterations(self.ITERATIONS_DOWN_FACTOR)
        elif key in self.SCHEME_KEYS:
            self.settings = replace(self.settings, color_scheme=self.SCHEME_KEYS[key])
            self.update_texture = True

    def change_iterations(self, factor):
        """Scale the iteration budget, never below 1."""
        self.max_iterations = max(1, int(round(self.max_iterations * factor)))
        logger.info("Max iterations: %d", self.max_iterations)
        self.update_image = True

    def handle_click(self, button, pos):
        """Left click centers the view, right click logs the point."""
        x, y = pos
        z = self.transform.screen_to_complex(x, y)
        if button == 1:
            self.transform.center_at(z)
            self.update_image = True
        elif button == 3:
            # Point and count both come from the frame on screen
            iterations = None
            if self.image is not None:
                z = self.image_transform.screen_to_complex(x, y)
                if 0 <= x < self.image.width and 0 <= y < self.image.height:
                    iterations = self.image.cell_at(x, y).iterations
            logger.info("Complex: [%s, %si], iterations: %s", z.real, z.imag, iterations)

    def _handle_resize(self, width, height):
        """Replace the transform for the new window size."""
        if width <= 0 or height <= 0:
            return
        self.width, self.height = width, height
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self.transform = CoordinateTransform((width, height))
        self._build_preview()
        self.update_image = True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _maybe_start_render(self):
        """Hand the current view to the background renderer if it changed."""
        if self.update_image:
            self.renderer.compute_async(self.transform, self.max_iterations)
            self.update_image = False
            pygame.display.set_caption("Computing...")

    def _check_render_result(self):
        """Pick up a finished frame from the renderer."""
        result = self.renderer.get_result()
        if result is not None:
            self._apply_result(result)

    def _apply_result(self, result):
        if result.error is not None:
            # Keep showing the last good frame
            self.last_error = result.error
            pygame.display.set_caption(f"Generation failed: {result.error}")
            return
        self.last_error = None
        self.image = result.image
        self.image_transform = result.transform
        self.update_texture = True
        pygame.display.set_caption(f"{self.CAPTION} - zoom {result.transform.zoom_factor():g}x")

    def _maybe_update_texture(self):
        """Recolor the current image when it or the draw settings changed."""
        if not self.update_texture or self.image is None:
            return
        start = time.perf_counter()
        settings = self.settings
        if settings.use_histogram:
            values = self.image.iterations_equalized
        else:
            values = self.image.iterations
        rgb = colorize(settings.color_scheme, values, self.image.max_iterations)
        self.frame_surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
        self.update_texture = False
        logger.debug("Texture drawn in %.3fs", time.perf_counter() - start)

    def _draw(self):
        """Draw the current frame (or the palette preview)."""
        self.screen.fill((0, 0, 0))
        surface = self.preview_surface if self.settings.show_colors else self.frame_surface
        if surface is not None:
            self.screen.blit(surface, (0, 0))
        pygame.display.flip()


def run(config=None):
    """
    Run the Mandelbrot explorer.

    Args:
        config: Config instance (default: Config())
    """
    app = MandelscopeApp(config)
    try:
        app.run()
    except KeyboardInterrupt:
        pass
