from __future__ import annotations

from typing import Tuple

import pygame

from falling_block_rl.game import CATALOG, GamePhase, GameSnapshot


def _color_for_value(v: int) -> Tuple[int, int, int]:
    if v == 0:
        return (20, 20, 26)
    return CATALOG[abs(v)].rgb


class Renderer:
    """Draws a :class:`GameSnapshot`: field, next piece preview, score and phase overlay."""

    def __init__(self, cell_size: int = 30, margin: int = 20, panel_cells: int = 6) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_cells = panel_cells
        self._font = None

    def window_size(self, width: int, height: int) -> Tuple[int, int]:
        return (
            self.margin * 3 + (width + self.panel_cells) * self.cell_size,
            self.margin * 2 + height * self.cell_size,
        )

    def _font_obj(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 28)
        return self._font

    def _grid_surface(self, snapshot: GameSnapshot) -> pygame.Surface:
        state = snapshot.board()
        h, w = state.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, _color_for_value(int(state[y, x])), rect)
        return surf

    def _draw_panel(self, screen: pygame.Surface, snapshot: GameSnapshot, x0: int) -> None:
        font = self._font_obj()
        y0 = self.margin
        screen.blit(font.render("NEXT", True, (230, 230, 230)), (x0, y0))
        piece = snapshot.next_piece
        n = piece.size
        offset = (self.panel_cells - n) * self.cell_size // 2
        for py in range(n):
            for px in range(n):
                if piece.shape[py, px]:
                    rect = pygame.Rect(
                        x0 + offset + px * self.cell_size,
                        y0 + 30 + py * self.cell_size,
                        self.cell_size - 1,
                        self.cell_size - 1,
                    )
                    pygame.draw.rect(screen, piece.rgb, rect)
        lines = (
            f"Score {snapshot.score}",
            f"Level {snapshot.level}",
            f"Lines {snapshot.lines_total}",
        )
        for i, text in enumerate(lines):
            screen.blit(font.render(text, True, (230, 230, 230)), (x0, y0 + 40 + 5 * self.cell_size + i * 30))

    def _draw_overlay(self, screen: pygame.Surface, text: str, area: pygame.Rect) -> None:
        veil = pygame.Surface(area.size, pygame.SRCALPHA)
        veil.fill((255, 255, 255, 128))
        screen.blit(veil, area.topleft)
        label = pygame.font.SysFont(None, 40).render(text, True, (0, 0, 0))
        screen.blit(label, label.get_rect(center=area.center))

    def draw(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        grid_surf = self._grid_surface(snapshot)
        screen.fill((10, 10, 14))
        screen.blit(grid_surf, (self.margin, self.margin))
        self._draw_panel(screen, snapshot, self.margin * 2 + grid_surf.get_width())
        field = pygame.Rect((self.margin, self.margin), grid_surf.get_size())
        if snapshot.phase is GamePhase.PAUSED:
            self._draw_overlay(screen, "PAUSED", field)
        elif snapshot.phase is GamePhase.GAME_OVER:
            self._draw_overlay(screen, "GAME OVER - R to restart", field)
        pygame.display.flip()
