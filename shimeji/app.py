"""
Shimeji - window host (GLFW version)

The window stands in for the desktop: its client area is the character's
viewport. The host owns the frame loop and the input; the character owns
everything else.

No drawing happens here. The window title shows what the character is
doing, which is enough to drive and watch it by hand.
"""

import logging
from typing import Optional

import glfw

from .clock import GlfwClock
from .config import ShimejiConfig
from .entities import Shimeji, SpriteLoader

log = logging.getLogger(__name__)

DOUBLE_CLICK_MS = 300.0
DRAG_THRESHOLD_PX = 3.0


class ShimejiApp:
    """Main application - one window, one character"""

    def __init__(self, config: Optional[ShimejiConfig] = None):
        self.config = config or ShimejiConfig()
        viewport = self.config.viewport

        # Initialize GLFW
        if not glfw.init():
            raise RuntimeError("Could not initialize GLFW")

        # Nothing is rendered, so no GL context is needed
        glfw.window_hint(glfw.CLIENT_API, glfw.NO_API)
        glfw.window_hint(glfw.RESIZABLE, glfw.TRUE)

        self.window = glfw.create_window(
            int(viewport.width), int(viewport.height),
            f"Shimeji - {self.config.character_name}", None, None
        )
        if not self.window:
            glfw.terminate()
            raise RuntimeError("Could not create GLFW window")

        # Set callbacks
        glfw.set_key_callback(self.window, self._key_callback)
        glfw.set_mouse_button_callback(self.window, self._mouse_button_callback)
        glfw.set_cursor_pos_callback(self.window, self._cursor_pos_callback)
        glfw.set_window_size_callback(self.window, self._resize_callback)

        self.clock = GlfwClock()
        self.character = Shimeji(
            self.config,
            clock=self.clock,
            loader=SpriteLoader(self.config.asset_dir,
                                self.config.character_name),
        )

        # Input state
        self.mouse_pos = (0.0, 0.0)
        self.pressed = False
        self.dragging = False
        self.press_pos = (0.0, 0.0)
        self.grab_offset = (0.0, 0.0)
        self.last_click_ms = -1e9

        self.running = True
        self._last_title = ""

    # =========================================================================
    # INPUT
    # =========================================================================

    def _key_callback(self, window, key, scancode, action, mods):
        """Handle keyboard input"""
        if action != glfw.PRESS:
            return
        if key in (glfw.KEY_ESCAPE, glfw.KEY_Q):
            self.running = False
        elif key == glfw.KEY_J:
            self.character.jump()
        elif key == glfw.KEY_C:
            self.character.crawl()

    def _mouse_button_callback(self, window, button, action, mods):
        """Handle mouse buttons"""
        x, y = self.mouse_pos
        if button == glfw.MOUSE_BUTTON_RIGHT and action == glfw.PRESS:
            self.character.move_to(x, y)
            return

        if button != glfw.MOUSE_BUTTON_LEFT:
            return

        if action == glfw.PRESS:
            if not self.character.contains(x, y):
                return
            body = self.character.physics.body
            self.pressed = True
            self.press_pos = (x, y)
            self.grab_offset = (x - body.x, y - body.y)
        elif action == glfw.RELEASE and self.pressed:
            self.pressed = False
            if self.dragging:
                self.dragging = False
                self.character.on_drag_end()
                return
            now = self.clock.now()
            if now - self.last_click_ms <= DOUBLE_CLICK_MS:
                self.character.on_double_click()
            else:
                self.character.on_click()
            self.last_click_ms = now

    def _cursor_pos_callback(self, window, xpos, ypos):
        """Handle mouse movement"""
        self.mouse_pos = (xpos, ypos)
        if not self.pressed:
            return

        if not self.dragging:
            dx = xpos - self.press_pos[0]
            dy = ypos - self.press_pos[1]
            if abs(dx) < DRAG_THRESHOLD_PX and abs(dy) < DRAG_THRESHOLD_PX:
                return
            self.dragging = True
            self.character.on_drag_start()

        self.character.on_drag_move(xpos - self.grab_offset[0],
                                    ypos - self.grab_offset[1])

    def _resize_callback(self, window, width, height):
        """Handle window resize"""
        self.character.resize(width, height)

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    def _update_title(self):
        snap = self.character.snapshot()
        title = (f"Shimeji - {snap['behavior'] or '-'} / {snap['state']} "
                 f"#{snap['frame_index']} ({snap['x']:.0f}, {snap['y']:.0f}) "
                 f"{snap['direction']}")
        if title != self._last_title:
            glfw.set_window_title(self.window, title)
            self._last_title = title

    def run(self):
        """Main application loop"""
        log.info("Window %dx%d, character %s",
                 self.config.viewport.width, self.config.viewport.height,
                 self.config.character_name)
        self.character.start()
        try:
            while self.running and not glfw.window_should_close(self.window):
                glfw.wait_events_timeout(self.config.physics.tick_ms / 1000.0)
                self.clock.run_due()
                self._update_title()
        finally:
            self.character.stop()
            glfw.terminate()
