"""
Live pygame preview of a particle run.

The window loop plays the part of the frame scheduler: it feeds elapsed
time into the engine once per display frame and draws the result.
Closing the window (or pressing Escape) cancels the run.
"""

import numpy as np
import pygame

from pixelmorph.animation.particles import ParticleConvergenceEngine, RenderBatch

GLOW_ALPHA = 70


def array_to_surface(frame: np.ndarray) -> pygame.Surface:
    """(H, W, 3|4) uint8 array to a pygame Surface (alpha is dropped)."""
    # pygame indexes surfaces as (width, height)
    return pygame.surfarray.make_surface(np.transpose(frame[..., :3], (1, 0, 2)))


def surface_to_array(surface: pygame.Surface) -> np.ndarray:
    """Convert a pygame surface to an (H, W, 3) numpy array."""
    arr = pygame.surfarray.array3d(surface)
    return np.transpose(arr, (1, 0, 2))


def draw_batch(
    surface: pygame.Surface,
    batch: RenderBatch,
    background: tuple[int, int, int] = (255, 255, 255),
):
    """
    Draw one tick's particles onto ``surface``.

    Fast particles get a translucent halo sized by their glow value,
    drawn under the particle squares. Squares keep their alpha: they are
    filled onto a transparent layer (later particles replace earlier ones)
    which is then blended over the background in one blit.
    """
    surface.fill(background)
    size = batch.size

    glowing = np.flatnonzero(batch.glow > 0)
    if len(glowing):
        halo = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        for i in glowing:
            pad = int(batch.glow[i])
            r, g, b = (int(c) for c in batch.colors[i, :3])
            rect = pygame.Rect(
                int(batch.xs[i]) - pad,
                int(batch.ys[i]) - pad,
                size + 2 * pad,
                size + 2 * pad,
            )
            pygame.draw.rect(halo, (r, g, b, GLOW_ALPHA), rect)
        surface.blit(halo, (0, 0))

    squares = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    for x, y, color in zip(batch.xs, batch.ys, batch.colors):
        squares.fill(tuple(int(c) for c in color), pygame.Rect(int(x), int(y), size, size))
    surface.blit(squares, (0, 0))


def run_preview(
    engine: ParticleConvergenceEngine,
    final_image: np.ndarray | None = None,
    title: str = "pixelmorph",
    linger_ms: int = 1500,
) -> bool:
    """
    Play a run in a window.

    Args:
        engine: Fresh (or reset) engine.
        final_image: Authoritative target raster displayed on completion.
        title: Window caption.
        linger_ms: How long the finished image stays up.

    Returns:
        True if the run completed, False if the window was closed first.
    """
    cfg = engine.cfg
    pygame.init()
    try:
        screen = pygame.display.set_mode((engine.width, engine.height))
        pygame.display.set_caption(title)
        clock = pygame.time.Clock()
        start = pygame.time.get_ticks()

        while True:
            for event in pygame.event.get():
                if event.type == pygame.QUIT or (
                    event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE
                ):
                    engine.cancel()
                    return False

            batch = engine.tick(pygame.time.get_ticks() - start)
            draw_batch(screen, batch, cfg.background)

            if batch.completed:
                if final_image is not None:
                    screen.blit(array_to_surface(final_image), (0, 0))
                pygame.display.flip()
                pygame.time.wait(linger_ms)
                return True

            pygame.display.flip()
            clock.tick(cfg.fps)
    finally:
        pygame.quit()
