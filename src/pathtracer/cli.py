"""Command line entry point: render the box scene to a PPM file.

Usage:
    pathtracer [samples] [options]

Arguments:
    samples             Total samples per pixel, divided over the 2x2
                        sub-pixels (default: 4, i.e. 1 per sub-pixel)

Options:
    --seed SEED         Seed for a reproducible image (default: OS entropy)
    --output OUTPUT     Output file path (default: image.ppm)
    --png PATH          Also write an 8-bit PNG
    --arch ARCH         Taichi backend (default: cpu)
    -v, --verbose       Log progress details (-vv for debug output)

Exit status is 0 on success, 1 on a fatal error (invalid scene or camera,
no entropy source, unusable backend, unwritable output) and 130 when interrupted.

Example:
    python -m src.pathtracer 1024
"""

import argparse
import logging
import signal
import sys
import threading
from collections.abc import Sequence

from src.pathtracer.config import BackendUnavailableError, RenderConfig, init_taichi
from src.pathtracer.core.random_stream import EntropyUnavailableError
from src.pathtracer.core.ray import DegenerateVectorError
from src.pathtracer.core.renderer import Renderer, RenderCancelled
from src.pathtracer.logconfig import level_for_verbosity, setup_logging
from src.pathtracer.output.export import save_png, save_ppm
from src.pathtracer.scene.box import create_box_scene
from src.pathtracer.scene.scene import SceneConfigurationError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    defaults = RenderConfig()
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render the box scene with Monte Carlo path tracing.",
    )
    parser.add_argument(
        "samples",
        type=int,
        nargs="?",
        default=defaults.total_samples,
        help=f"Total samples per pixel (default: {defaults.total_samples})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for a reproducible image (default: OS entropy)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=defaults.output,
        help=f"Output file path (default: {defaults.output})",
    )
    parser.add_argument(
        "--png",
        type=str,
        default=None,
        help="Also write an 8-bit PNG to this path",
    )
    parser.add_argument(
        "--arch",
        type=str,
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity",
    )
    return parser


def _print_progress(spp: int):
    def callback(done: int, total: int) -> None:
        print(f"\rRendering ({spp} spp) {100.0 * done / total:5.2f}%", end="", file=sys.stderr, flush=True)

    return callback


def run(config: RenderConfig, *, png_path: str | None = None, cancel_event: threading.Event | None = None) -> None:
    """Render the box scene as described by ``config`` and write the image.

    Args:
        config: Render settings.
        png_path: Optional path of an additional PNG copy.
        cancel_event: Cancels the render between row batches when set.

    Raises:
        RenderCancelled: If cancel_event is set during the render.
        SceneConfigurationError: If the scene is invalid.
        DegenerateVectorError: If the camera cannot be set up.
        EntropyUnavailableError: If no seed is given and entropy is unavailable.
        OSError: If the image cannot be written.
    """
    scene, camera = create_box_scene()
    renderer = Renderer(
        scene,
        camera,
        config.width,
        config.height,
        samples_per_subpixel=config.samples_per_subpixel,
        seed=config.seed,
    )

    try:
        renderer.render(
            batch_rows=config.batch_rows,
            callback=_print_progress(renderer.samples_per_pixel),
            cancel_event=cancel_event,
        )
    finally:
        print(file=sys.stderr)

    image = renderer.get_image_numpy()
    save_ppm(image, config.output)
    if png_path is not None:
        save_png(image, png_path)


def main(argv: Sequence[str] | None = None, *, init_runtime: bool = True) -> int:
    """Run the command line interface.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:]).
        init_runtime: Initialize Taichi before rendering. Callers that have
            already initialized it (in double precision) pass False.

    Returns:
        The process exit status.
    """
    args = build_parser().parse_args(argv)
    setup_logging(level=level_for_verbosity(args.verbose))

    cancel_event = threading.Event()

    def _on_sigint(signum, frame):
        cancel_event.set()

    previous_handler = signal.signal(signal.SIGINT, _on_sigint)
    try:
        config = RenderConfig(total_samples=args.samples, seed=args.seed, output=args.output)
        if init_runtime:
            init_taichi(args.arch)
        run(config, png_path=args.png, cancel_event=cancel_event)
    except RenderCancelled:
        print("pathtracer: interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    except (
        BackendUnavailableError,
        EntropyUnavailableError,
        SceneConfigurationError,
        DegenerateVectorError,
        ValueError,
        OSError,
    ) as exc:
        logger.debug("Fatal error", exc_info=True)
        print(f"pathtracer: error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    return EXIT_OK
