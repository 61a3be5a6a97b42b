"""Pygame window: the staff, the three action buttons and the status line."""

import time

import pygame

from ..exercise import EarTrainingExercise
from ..logger import get_logger
from ..note_types import FeedbackTone, MatchPhase
from ..note_utils import to_display_label
from .staff import (
    StaffLayout,
    has_sharp,
    ledger_steps,
    staff_step,
    time_signature,
)

# Get logger for this module
logger = get_logger(__name__)

TONE_COLORS = {
    FeedbackTone.NEUTRAL: (220, 220, 220),
    FeedbackTone.CORRECT: (120, 230, 120),
    FeedbackTone.INCORRECT: (255, 110, 90),
}


class PygameUI:
    """Pygame-based UI for Melody Echo"""

    def __init__(self):
        """Initialize the Pygame UI"""
        self.screen = None
        self.width = 800
        self.height = 480
        self.bg_color = (20, 20, 30)
        self.staff_bg_color = (245, 242, 232)
        self.ink_color = (20, 20, 20)
        self.highlight_color = (0, 122, 255)
        self.button_color = (0, 122, 255)
        self.disabled_color = (90, 90, 100)
        self.button_text_color = (255, 255, 255)
        self.initialized = False
        self.clock = None
        self.staff = StaffLayout(x=60, y=90, width=680, line_spacing=14)

        # Fonts
        self.title_font = None
        self.medium_font = None
        self.small_font = None

        # Button rectangles, laid out in init_screen
        self.buttons = {}

        logger.debug("Initializing PygameUI")

    def init_screen(self):
        """Initialize the Pygame screen and resources"""
        try:
            pygame.init()
            self.screen = pygame.display.set_mode((self.width, self.height))
            pygame.display.set_caption("Melody Echo")

            self.title_font = pygame.font.SysFont("Arial", 36, bold=True)
            self.medium_font = pygame.font.SysFont("Arial", 26)
            self.small_font = pygame.font.SysFont("Arial", 20)

            button_y = 300
            self.buttons = {
                "connect": pygame.Rect(60, button_y, 220, 50),
                "play": pygame.Rect(290, button_y, 220, 50),
                "match": pygame.Rect(520, button_y, 220, 50),
            }

            self.clock = pygame.time.Clock()
            self.initialized = True
            logger.info("Pygame UI initialized successfully")
            return self.screen

        except pygame.error as e:
            logger.error(f"Failed to initialize Pygame: {e}")
            self.cleanup()
            raise

    def draw_button(self, text, rect, enabled):
        """Draw a button and return True if it is enabled and hovered."""
        is_hovering = enabled and rect.collidepoint(pygame.mouse.get_pos())
        color = self.button_color if enabled else self.disabled_color

        if is_hovering:
            pygame.draw.rect(self.screen, color, rect)
        else:
            pygame.draw.rect(self.screen, color, rect, 2)

        text_surf = self.small_font.render(text, True, self.button_text_color)
        text_rect = text_surf.get_rect(center=rect.center)
        self.screen.blit(text_surf, text_rect)
        return is_hovering

    def draw_staff(self, exercise):
        """Draw the target melody, highlighting the note being listened for."""
        staff = self.staff
        panel = pygame.Rect(
            staff.x - 20, staff.y - 60, staff.width + 40, staff.line_spacing * 4 + 120
        )
        pygame.draw.rect(self.screen, self.staff_bg_color, panel, border_radius=6)

        for line_y in staff.line_ys():
            pygame.draw.line(
                self.screen,
                self.ink_color,
                (staff.x, line_y),
                (staff.x + staff.width, line_y),
                1,
            )

        clef_surf = self.title_font.render("G", True, self.ink_color)
        self.screen.blit(clef_surf, clef_surf.get_rect(center=(staff.x + 20, staff.step_y(2))))
        signature_surf = self.small_font.render(
            time_signature(exercise.sequence), True, self.ink_color
        )
        self.screen.blit(
            signature_surf, signature_surf.get_rect(center=(staff.x + 55, staff.step_y(4)))
        )

        count = len(exercise.sequence)
        awaiting = exercise.phase is MatchPhase.AWAITING
        head_w = staff.line_spacing * 1.4
        head_h = staff.line_spacing

        for index, note in enumerate(exercise.sequence):
            step = staff_step(note)
            x = staff.note_x(index, count)
            y = staff.step_y(step)

            if awaiting and index == exercise.position:
                color = self.highlight_color
            elif index < exercise.position:
                color = TONE_COLORS[FeedbackTone.CORRECT]
            else:
                color = self.ink_color

            for ledger in ledger_steps(step):
                ledger_y = staff.step_y(ledger)
                pygame.draw.line(
                    self.screen,
                    self.ink_color,
                    (x - head_w, ledger_y),
                    (x + head_w, ledger_y),
                    1,
                )

            head = pygame.Rect(0, 0, head_w, head_h)
            head.center = (x, y)
            pygame.draw.ellipse(self.screen, color, head)

            # Quarter-note stem, down for notes on or above the middle line
            if step >= 4:
                pygame.draw.line(
                    self.screen, color, (x - head_w / 2, y), (x - head_w / 2, y + 3.5 * staff.line_spacing), 2
                )
            else:
                pygame.draw.line(
                    self.screen, color, (x + head_w / 2, y), (x + head_w / 2, y - 3.5 * staff.line_spacing), 2
                )

            if has_sharp(note):
                sharp_surf = self.small_font.render("#", True, color)
                self.screen.blit(sharp_surf, sharp_surf.get_rect(center=(x - head_w * 1.3, y)))

            label_surf = self.small_font.render(to_display_label(note), True, (90, 90, 90))
            self.screen.blit(
                label_surf, label_surf.get_rect(midtop=(x, staff.bottom_y + 3 * staff.line_spacing))
            )

    def update_display(self, exercise):
        """Redraw the whole window and return the hovered button, if any."""
        if not self.initialized or not self.screen:
            return None

        self.screen.fill(self.bg_color)

        title_surf = self.title_font.render("Melody Echo", True, (255, 255, 0))
        self.screen.blit(title_surf, title_surf.get_rect(midtop=(self.width // 2, 10)))

        self.draw_staff(exercise)

        controls = exercise.controls
        hovered = None
        labels = {
            "connect": ("Connect Microphone", controls.connect_enabled),
            "play": ("Play Sequence", controls.play_enabled),
            "match": ("Start Matching", controls.match_enabled),
        }
        for name, (text, enabled) in labels.items():
            if self.draw_button(text, self.buttons[name], enabled):
                hovered = name

        status = exercise.status
        status_surf = self.medium_font.render(status.text, True, TONE_COLORS[status.tone])
        self.screen.blit(status_surf, status_surf.get_rect(center=(self.width // 2, 400)))

        pygame.display.flip()
        return hovered

    def run(self, exercise: EarTrainingExercise):
        """Run the event loop until the window is closed.

        Args:
            exercise: The exercise to drive
        """
        if not self.initialized:
            self.init_screen()

        actions = {
            "connect": exercise.connect_microphone,
            "play": exercise.play_sequence,
            "match": exercise.start_matching,
        }

        started = time.perf_counter()
        try:
            running = True
            hovered = None
            while running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.MOUSEBUTTONDOWN and hovered:
                        actions[hovered]()
                    elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                        exercise.stop_matching()

                exercise.update()
                hovered = self.update_display(exercise)
                self.clock.tick(30)
        finally:
            logger.info(f"UI loop ended after {time.perf_counter() - started:.1f}s")
            exercise.shutdown()
            self.cleanup()

    def cleanup(self):
        """Clean up Pygame resources"""
        if self.initialized:
            logger.info("Cleaning up Pygame UI")
            pygame.quit()
            self.initialized = False
