# =============================================================================
# MODULE: gui_app.py
# Connect Four - Pygame view layer and client entry point
# Renders the controller's Session snapshot and forwards user intents.
# =============================================================================

import os
os.environ.setdefault('SDL_AUDIODRIVER', 'dummy')

import argparse
import logging
import sys
import threading
import time

import pygame

from config import LEADERBOARD_REFRESH, ClientConfig
from game_controller import GameController
from game_core import COLS, PLAYER1_PIECE, PLAYER2_PIECE, ROWS, other_player
from leaderboard import LeaderboardError, fetch_leaderboard
from network_client import SyncClient
from scheduler import Scheduler
from session_state import GameMode, Outcome, Screen

logger = logging.getLogger('GUI')

# =============================================================================
# LAYOUT
# =============================================================================

CELL_SIZE = 80
BOARD_X, BOARD_Y = 20, 80
BOARD_WIDTH = COLS * CELL_SIZE
BOARD_HEIGHT = ROWS * CELL_SIZE
WINDOW_WIDTH = BOARD_WIDTH + 320
WINDOW_HEIGHT = BOARD_HEIGHT + 150
MAX_NAME_LENGTH = 24

COLORS = {
    'bg': (26, 26, 46),
    'board': (15, 52, 96),
    'panel': (22, 33, 62),
    'red': (233, 69, 96),
    'yellow': (241, 196, 15),
    'white': (234, 234, 234),
    'gray': (127, 140, 141),
    'green': (46, 204, 113),
    'cell_bg': (10, 10, 21),
    'hover': (52, 152, 219),
    'button': (233, 69, 96),
    'input_bg': (44, 62, 80),
    'input_active': (52, 152, 219),
}

PIECE_COLORS = {PLAYER1_PIECE: COLORS['red'], PLAYER2_PIECE: COLORS['yellow']}

RESULT_COPY = {
    Outcome.WIN: 'You won the round.',
    Outcome.LOSS: 'Opponent took the round.',
    Outcome.DRAW: 'Round ended in a draw.',
}


def column_at(x, y):
    """Board column under a window position, or None outside the board."""
    if BOARD_X <= x < BOARD_X + BOARD_WIDTH and BOARD_Y <= y < BOARD_Y + BOARD_HEIGHT:
        return (x - BOARD_X) // CELL_SIZE
    return None


class ConnectFourGUI:
    def __init__(self, config: ClientConfig):
        pygame.init()
        pygame.display.set_caption("Connect Four")
        self.screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        self.clock = pygame.time.Clock()
        self.font_large = pygame.font.SysFont('segoeui', 36, bold=True)
        self.font_medium = pygame.font.SysFont('segoeui', 24)
        self.font_small = pygame.font.SysFont('segoeui', 18)

        self.config = config
        self.scheduler = Scheduler()
        if config.mode == 'online':
            self.sync_client = SyncClient(config.server_url, self.scheduler)
            self.controller = GameController(self.scheduler, GameMode.ONLINE, sync_client=self.sync_client)
        else:
            self.sync_client = None
            self.controller = GameController(self.scheduler, GameMode.LOCAL)

        self.name_input = ''
        self.hover_col = None
        self.buttons = []
        self.running = True

        self.leaderboard = []
        self.leaderboard_error = None
        self.last_leaderboard_refresh = 0
        self.leaderboard_loading = False

        logger.info(f"GUI initialized, mode={config.mode}")

    # =========================================================================
    # DRAWING
    # =========================================================================

    def draw_text(self, text, font, color, x, y, center=True):
        surface = font.render(str(text), True, color)
        rect = surface.get_rect()
        if center:
            rect.center = (x, y)
        else:
            rect.topleft = (x, y)
        self.screen.blit(surface, rect)

    def draw_button(self, text, x, y, w, h, color=None):
        color = color or COLORS['button']
        pygame.draw.rect(self.screen, color, (x, y, w, h), border_radius=8)
        self.draw_text(text, self.font_small, COLORS['white'], x + w//2, y + h//2)
        return pygame.Rect(x, y, w, h)

    def draw_name_entry(self, session):
        cx = WINDOW_WIDTH // 2
        self.draw_text("CONNECT FOUR", self.font_large, COLORS['red'], cx, 80)
        self.draw_text(session.message, self.font_medium, COLORS['white'], cx, 140)

        fw, fh = 300, 45
        self.draw_text("Username", self.font_small, COLORS['gray'], cx, 200)
        pygame.draw.rect(self.screen, COLORS['input_active'], (cx - fw//2, 220, fw, fh), border_radius=6)
        pygame.draw.rect(self.screen, COLORS['white'], (cx - fw//2, 220, fw, fh), 2, border_radius=6)
        self.draw_text(self.name_input or "e.g. infra_alchemist", self.font_medium, COLORS['white'], cx, 220 + fh//2)

        self.buttons = [('SUBMIT_NAME', self.draw_button("Enter Lobby", cx - 100, 300, 200, 45))]
        if self.controller.validation_error:
            self.draw_text(self.controller.validation_error, self.font_small, COLORS['red'], cx, 380)

    def draw_matchmaking(self, session):
        cx = WINDOW_WIDTH // 2
        self.draw_text("Matchmaking in progress", self.font_large, COLORS['white'], cx, 140)
        self.draw_text(f"{session.username}, we're pairing you with an opponent.", self.font_small, COLORS['gray'], cx, 200)
        dots = "." * (int(time.time() * 2) % 4)
        self.draw_text(session.message + dots, self.font_medium, COLORS['hover'], cx, 260)
        self.buttons = []

    def draw_board(self, session):
        pygame.draw.rect(self.screen, COLORS['board'], (BOARD_X-10, BOARD_Y-10, BOARD_WIDTH+20, BOARD_HEIGHT+20), border_radius=10)
        for row in range(ROWS):
            for col in range(COLS):
                x = BOARD_X + col * CELL_SIZE + CELL_SIZE // 2
                y = BOARD_Y + row * CELL_SIZE + CELL_SIZE // 2
                pygame.draw.circle(self.screen, COLORS['cell_bg'], (x, y), CELL_SIZE // 2 - 5)
                cell = session.board[row][col]
                if cell in PIECE_COLORS:
                    pygame.draw.circle(self.screen, PIECE_COLORS[cell], (x, y), CELL_SIZE // 2 - 8)

        if self.hover_col is not None and session.is_my_turn:
            pygame.draw.circle(self.screen, COLORS['hover'],
                               (BOARD_X + self.hover_col * CELL_SIZE + CELL_SIZE//2, 50), CELL_SIZE//2 - 10)

    def draw_info_panel(self, session):
        px, py = BOARD_WIDTH + 50, 80
        pygame.draw.rect(self.screen, COLORS['panel'], (px, py, 250, 320), border_radius=10)
        self.draw_text("MATCH", self.font_medium, COLORS['white'], px+125, py+25)

        you, them = session.local_player, other_player(session.local_player)
        pygame.draw.circle(self.screen, PIECE_COLORS[you], (px+25, py+70), 15)
        self.draw_text(session.username[:12], self.font_small, COLORS['white'], px+50, py+60, center=False)
        pygame.draw.circle(self.screen, PIECE_COLORS[them], (px+25, py+120), 15)
        self.draw_text((session.opponent or 'TBD')[:12], self.font_small, COLORS['white'], px+50, py+110, center=False)

        if session.screen == Screen.IN_PROGRESS:
            turn_y = py+70 if session.current_turn == you else py+120
            self.draw_text("< TURN", self.font_small, COLORS['green'], px+200, turn_y)
        if session.outcome is not None:
            self.draw_text(RESULT_COPY[session.outcome], self.font_small, COLORS['yellow'], px+125, py+170)
        if session.match_id:
            self.draw_text(f"Game: {session.match_id[:10]}", self.font_small, COLORS['hover'], px+125, py+200)

        self.buttons = []
        if session.screen == Screen.FINISHED:
            self.buttons.append(('RESTART', self.draw_button("Restart match", px+50, py+250, 150, 40)))

    def draw_leaderboard(self, session):
        px, py = BOARD_WIDTH + 50, 420
        self.draw_text("LEADERBOARD", self.font_small, COLORS['white'], px+125, py)
        if self.leaderboard_error:
            self.draw_text("Leaderboard unavailable.", self.font_small, COLORS['gray'], px+125, py+25)
            return
        y = py + 25
        for entry in self.leaderboard[:5]:
            color = COLORS['green'] if entry.matches(session.username) else COLORS['white']
            self.draw_text(f"{entry.rank}. {entry.username[:12]}  {entry.wins}W/{entry.losses}L",
                           self.font_small, color, px+10, y, center=False)
            y += 22

    def draw_game(self, session):
        title = "Online Match" if session.mode == GameMode.ONLINE else "Local Match"
        self.draw_text(title, self.font_medium, COLORS['white'], BOARD_X + BOARD_WIDTH//2, 30)
        self.draw_board(session)
        self.draw_info_panel(session)
        if session.mode == GameMode.ONLINE:
            self.draw_leaderboard(session)
        self.draw_text(session.message, self.font_small, COLORS['gray'], WINDOW_WIDTH//2, WINDOW_HEIGHT-30)

    def draw(self):
        session = self.controller.state
        self.screen.fill(COLORS['bg'])
        if session.screen == Screen.AWAITING_NAME:
            self.draw_name_entry(session)
        elif session.screen == Screen.MATCHMAKING:
            self.draw_matchmaking(session)
        else:
            self.draw_game(session)

    # =========================================================================
    # LEADERBOARD
    # =========================================================================

    def refresh_leaderboard(self):
        if self.leaderboard_loading or time.time() - self.last_leaderboard_refresh < LEADERBOARD_REFRESH:
            return
        self.leaderboard_loading = True
        self.last_leaderboard_refresh = time.time()

        def load():
            try:
                entries, error = fetch_leaderboard(self.config.server_url), None
            except LeaderboardError as e:
                entries, error = [], str(e)
            self.scheduler.call_soon(lambda: self._apply_leaderboard(entries, error), 'leaderboard')

        threading.Thread(target=load, daemon=True).start()

    def _apply_leaderboard(self, entries, error):
        self.leaderboard_loading = False
        self.leaderboard_error = error
        if error is None:
            self.leaderboard = entries

    # =========================================================================
    # EVENTS
    # =========================================================================

    def handle_events(self):
        session = self.controller.state
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                self.running = False
            elif e.type == pygame.MOUSEMOTION:
                self.hover_col = column_at(*e.pos)
            elif e.type == pygame.MOUSEBUTTONDOWN:
                for bid, rect in self.buttons:
                    if rect.collidepoint(e.pos):
                        self.handle_button_click(bid)
                        return
                col = column_at(*e.pos)
                if col is not None:
                    self.controller.click_column(col)
            elif e.type == pygame.KEYDOWN and session.screen == Screen.AWAITING_NAME:
                if e.key == pygame.K_RETURN:
                    self.handle_button_click('SUBMIT_NAME')
                elif e.key == pygame.K_BACKSPACE:
                    self.name_input = self.name_input[:-1]
                elif e.unicode.isprintable() and len(self.name_input) < MAX_NAME_LENGTH:
                    self.name_input += e.unicode

    def handle_button_click(self, bid):
        if bid == 'SUBMIT_NAME':
            self.controller.submit_username(self.name_input)
        elif bid == 'RESTART':
            self.controller.restart()

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    def run(self):
        logger.info("Main loop starting")
        try:
            while self.running:
                self.handle_events()
                self.scheduler.run_pending()
                if self.controller.mode == GameMode.ONLINE and self.controller.state.screen != Screen.AWAITING_NAME:
                    self.refresh_leaderboard()
                self.draw()
                pygame.display.flip()
                self.clock.tick(60)
        finally:
            self.controller.shutdown()
            self.scheduler.cancel_all()
            pygame.quit()


def parse_args(argv=None, config=None):
    config = config or ClientConfig.from_env()
    parser = argparse.ArgumentParser(description="Connect Four client")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--local', dest='mode', action='store_const', const='local',
                      help="play against the built-in opponent")
    mode.add_argument('--online', dest='mode', action='store_const', const='online',
                      help="play through the game server")
    parser.add_argument('--server', default=config.server_url, help="game server URL")
    parser.add_argument('--debug', action='store_true', default=config.debug, help="verbose logging")
    args = parser.parse_args(argv)
    return ClientConfig(server_url=args.server.rstrip('/'), mode=args.mode or config.mode, debug=args.debug)


def main(argv=None):
    config = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if config.debug else logging.INFO,
                        format='[%(name)s] %(levelname)s %(message)s')
    ConnectFourGUI(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
