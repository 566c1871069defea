import logging
import os
import sys
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import numpy as np

# Imports for output
import PIL.Image
import imageio.v2 as imageio

from fractals import (
    FractalKind,
    Palette,
    RenderResult,
    Session,
    ViewConfig,
    ZoomPlanner,
    export_view,
    load_session,
    make_config,
    render_frame,
    resolve_palette,
    save_session,
    zoom_schedule,
)
from fractals.config import config_options

logger = logging.getLogger("zoom")

Renderer = Callable[[int, int, Any, ViewConfig, Palette], RenderResult]


@dataclass
class OutputConfig:
    modes: tuple[str, ...]
    gif_path: Path | None
    image_path: Path | None
    frame_dir: Path | None
    image_format: str


def build_parser():
    parser = ArgumentParser(description="Render escape-time and Newton fractals to images or zoom animations.")

    parser.add_argument('--kind', type=str, choices=[kind.value for kind in FractalKind],
                        help='fractal to render (default: mandelbrot, or the loaded session)')

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of iterations per pixel',
                        metavar='MAX_ITERATIONS')

    parser.add_argument('--escape-threshold', type=float,
                        dest='escape_threshold', help='modulus beyond which an orbit counts as escaped',
                        metavar='THRESHOLD')

    parser.add_argument('--exponent', type=float,
                        help='power of z for the multibrot kind', metavar='EXPONENT')

    parser.add_argument('--parameter', type=float, nargs=2, metavar=('RE', 'IM'),
                        help='Julia constant, or the Phoenix constants')

    parser.add_argument('--width', type=int, default=512, help='raster width in pixels')

    parser.add_argument('--height', type=int, default=512, help='raster height in pixels')

    parser.add_argument('--center', type=float, nargs=2, metavar=('RE', 'IM'),
                        help='complex coordinate at the middle of the raster')

    parser.add_argument('--zoom', type=float, dest='zoom_scale', metavar='PIXELS_PER_UNIT',
                        help='magnification in pixels per unit length of the complex plane')

    parser.add_argument('--rotation', type=float, dest='rotation_degrees', metavar='DEGREES',
                        help='rotation of the raster around its centre')

    parser.add_argument('--export-scale', type=int, dest='export_scale', default=1, metavar='SCALE',
                        help='render SCALE times more pixels in each direction showing the same region')

    parser.add_argument('--palette', type=str, metavar='NAME',
                        help='catalog palette (electric, fire, psych, greyscale, rainbow) or a matplotlib colormap')

    parser.add_argument('--anchors', type=int, default=6,
                        help='number of anchor colours sampled from a matplotlib colormap')

    parser.add_argument('--shift', type=float, help='cyclic palette shift; wrapped into [0, 1)')

    parser.add_argument('--backend', choices=['tensorflow', 'scalar'], default='tensorflow',
                        help='vectorised TensorFlow renderer or the pixel-by-pixel reference scan')

    parser.add_argument('--frames', type=int, default=1,
                        help='number of frames; more than one renders a zoom sequence')

    parser.add_argument('--zoom-factor', type=float, dest='zoom_factor', default=1.25,
                        help='magnification applied between frames. Choose > 1 to zoom in, < 1 to zoom out')

    parser.add_argument('--final-zoom', type=float, default=None,
                        help='overall magnification reached by the last frame. If set, overrides --zoom-factor.')

    parser.add_argument('--easing', type=str, default='ease',
                        help='temporal curve used with --final-zoom: "linear" or "ease" for smooth ease-in-out.')

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='Output modes to generate. May be repeated. Choices: image, gif, frames.')

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination for single-file outputs (gif/image) or container directory when both are requested.')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='Directory in which to store numbered frames.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image-based outputs. Any extension supported by Pillow.',
                        metavar='FORMAT', default='png')

    parser.add_argument('--load', type=str, metavar='PATH', help='start from settings saved in a YAML file')

    parser.add_argument('--save-settings', type=str, dest='save_settings', metavar='PATH',
                        help='write the effective settings to a YAML file')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    valid_modes = {"image", "gif", "frames"}
    modes: list[str] = []
    for mode in opt.modes or ["image"]:
        if mode not in valid_modes:
            parser.error(f"Unknown output mode '{mode}'. Valid choices: {', '.join(sorted(valid_modes))}.")
        if mode not in modes:
            modes.append(mode)

    image_format = (opt.format or "png").lower().lstrip(".") or "png"

    frame_dir: Path | None = None
    if "frames" in modes:
        frame_dir = Path(opt.frame_dir or "./frames").expanduser().resolve()
    elif opt.frame_dir is not None:
        parser.error("--frame-dir is only valid with the frames mode.")

    file_modes = [mode for mode in modes if mode in {"gif", "image"}]
    gif_path: Path | None = None
    image_path: Path | None = None

    if not file_modes:
        if opt.output:
            parser.error("--output is only valid when gif or image modes are requested.")
    elif len(file_modes) == 1:
        output_path = Path(opt.output).expanduser() if opt.output else None
        if output_path is not None and output_path.is_dir():
            parser.error("--output must point to a file, not a directory, when a single file mode is active.")
        if file_modes[0] == "gif":
            output_path = output_path or Path("movie.gif")
            if not output_path.suffix:
                output_path = output_path.with_suffix(".gif")
            elif output_path.suffix.lower() != ".gif":
                parser.error("GIF outputs must end with .gif.")
            gif_path = output_path.resolve()
        else:
            expected_suffix = f".{image_format}"
            output_path = output_path or Path(f"fractal{expected_suffix}")
            if not output_path.suffix:
                output_path = output_path.with_suffix(expected_suffix)
            elif output_path.suffix.lower() != expected_suffix:
                parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
            image_path = output_path.resolve()
    else:
        base_dir = Path(opt.output).expanduser() if opt.output else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when both gif and image modes are active.")
        gif_path = (base_dir / "movie.gif").resolve()
        image_path = (base_dir / f"fractal.{image_format}").resolve()

    return OutputConfig(
        modes=tuple(modes),
        gif_path=gif_path,
        image_path=image_path,
        frame_dir=frame_dir,
        image_format=image_format,
    )


def resolve_session(opt, parser: ArgumentParser) -> Session:
    """Explicit flags over the loaded session over the defaults."""

    session = Session()
    if opt.load:
        try:
            session = load_session(opt.load)
        except (OSError, ValueError) as exc:
            parser.error(f"Cannot load settings from {opt.load}: {exc}")

    options = config_options(session.fractal)
    if opt.max_iterations is not None:
        options["max_iterations"] = opt.max_iterations
    if opt.escape_threshold is not None:
        options["escape_threshold"] = opt.escape_threshold
    if opt.exponent is not None:
        options["exponent"] = opt.exponent
    if opt.parameter is not None:
        options["parameter"] = complex(*opt.parameter)
    fractal = make_config(opt.kind or session.fractal.kind, **options)

    view = session.view
    view = ViewConfig(
        center=complex(*opt.center) if opt.center is not None else view.center,
        zoom_scale=opt.zoom_scale if opt.zoom_scale is not None else view.zoom_scale,
        rotation_degrees=opt.rotation_degrees if opt.rotation_degrees is not None else view.rotation_degrees,
    )

    return Session(
        fractal=fractal,
        view=view,
        palette=opt.palette or session.palette,
        shift=(opt.shift if opt.shift is not None else session.shift) % 1.0,
    )


def quiet_tensorflow() -> None:
    """Silence native TensorFlow logging unless TF_CPP_MIN_LOG_LEVEL is already set.

    Must run before tensorflow is first imported.
    """

    os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")
    if os.environ["TF_CPP_MIN_LOG_LEVEL"] != "0":
        warnings.filterwarnings("ignore", category=UserWarning, module="google.protobuf")


def make_renderer(backend: str, verbose: bool) -> Renderer:
    if backend == "scalar":
        return render_frame

    if not verbose:
        quiet_tensorflow()

    import tensorflow as tf
    from fractals.tensor import default_device, render_tensor

    if not verbose:
        tf.get_logger().setLevel("ERROR")
    logger.debug("TensorFlow version: %s", tf.__version__)
    device = default_device()

    def render_with_tensorflow(width, height, fractal, view, palette):
        return render_tensor(width, height, fractal, view, palette, device=device)

    return render_with_tensorflow


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def to_image(result: RenderResult) -> PIL.Image.Image:
    return PIL.Image.frombytes("RGBA", (result.width, result.height), result.pixels)


def to_array(result: RenderResult) -> np.ndarray:
    return np.frombuffer(result.pixels, dtype=np.uint8).reshape(result.height, result.width, 4)


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    pil_format = _pil_format_name(image_format)
    if pil_format == "JPEG":
        image = image.convert("RGB")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


def write_frame_sequence(image: PIL.Image.Image, frame_dir: Path, index: int, digits: int, image_format: str) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    frame_path = frame_dir / f"frame{index:0{digits}d}.{image_format}"
    write_single_image(image, frame_path, image_format)
    return frame_path


class OutputWriters:
    """Fan each rendered frame out to the requested outputs."""

    def __init__(self, config: OutputConfig, frame_digits: int) -> None:
        self.config = config
        self.frame_digits = frame_digits
        self._gif_writer = None
        if config.gif_path is not None:
            config.gif_path.parent.mkdir(parents=True, exist_ok=True)
            self._gif_writer = imageio.get_writer(str(config.gif_path), mode='I', duration=0.1, loop=0)

    def write_frame(self, index: int, result: RenderResult) -> None:
        if self._gif_writer is not None:
            self._gif_writer.append_data(to_array(result))
        if self.config.frame_dir is not None:
            path = write_frame_sequence(
                to_image(result), self.config.frame_dir, index, self.frame_digits, self.config.image_format
            )
            logger.debug("Wrote %s", path)

    def finalize(self, result: RenderResult | None) -> None:
        if result is not None and self.config.image_path is not None:
            write_single_image(to_image(result), self.config.image_path, self.config.image_format)
            logger.info("Image written to %s", self.config.image_path)

    def close(self) -> None:
        if self._gif_writer is not None:
            self._gif_writer.close()
            logger.info("Animation written to %s", self.config.gif_path)
            self._gif_writer = None


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    configure_logging(opt.verbose)

    output_config = resolve_output_config(opt, parser)
    session = resolve_session(opt, parser)

    if opt.width < 1 or opt.height < 1:
        parser.error("--width and --height must be positive.")
    if opt.export_scale < 1:
        parser.error("--export-scale must be at least 1.")
    if opt.frames < 1:
        parser.error("--frames must be at least 1.")
    if opt.zoom_factor <= 0:
        parser.error("--zoom-factor must be positive.")

    try:
        palette = resolve_palette(session.palette, opt.anchors).shifted(session.shift)
    except ValueError as exc:
        parser.error(str(exc))

    if opt.save_settings:
        save_session(opt.save_settings, session)

    width = opt.width * opt.export_scale
    height = opt.height * opt.export_scale
    view = export_view(session.view, opt.export_scale) if opt.export_scale > 1 else session.view
    fractal = session.fractal

    renderer = make_renderer(opt.backend, opt.verbose)
    planner = ZoomPlanner(width=width, height=height)
    per_frame_factors = zoom_schedule(
        opt.frames,
        opt.zoom_factor,
        final_zoom=opt.final_zoom,
        easing=opt.easing,
    )

    logger.info(
        "Rendering %s at %dx%d, centre %s, zoom %g, %d frame(s)",
        fractal.kind.value, width, height, view.center, view.zoom_scale, opt.frames,
    )

    try:
        if opt.frames > 1:
            view = planner.focus(view, renderer(width, height, fractal, view, palette), fractal.max_iterations)
    except ValueError as exc:
        parser.error(str(exc))

    writers = OutputWriters(output_config, frame_digits=max(3, len(str(opt.frames - 1))))
    result: RenderResult | None = None
    try:
        for i in range(opt.frames):
            logger.info("frame %d out of %d", i + 1, opt.frames)
            try:
                result = renderer(width, height, fractal, view, palette)
            except ValueError as exc:
                parser.error(str(exc))
            writers.write_frame(i, result)
            if i < opt.frames - 1:
                view = planner.advance(view, result, fractal.max_iterations, per_frame_factors[i])
    finally:
        writers.close()

    writers.finalize(result)


if __name__ == '__main__':
    main()
