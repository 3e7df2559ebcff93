import os
import sys
import time
import warnings

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


from argparse import ArgumentParser
from pathlib import Path

import tensorflow as tf

from fractals import (
    ByteOrder,
    CanvasDimensions,
    ComplexPoint,
    FractalError,
    ImageSurface,
    PlaneWindow,
    colormap_palette,
    palette_from_json,
    pixel_to_point,
    render_julia,
    render_mandelbrot,
)

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")

log("TensorFlow version: %s" % tf.__version__)

gpus = tf.config.list_physical_devices('GPU')
if gpus:
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
        DEVICE = '/GPU:0'
        log("GPU found, using %s" % gpus[0].name)
    except RuntimeError as e:
        if VERBOSE:
            print(e)
        DEVICE = '/CPU:0'
else:
    DEVICE = '/CPU:0'
    log("No GPU found, using CPU")

# Plane windows shown when no bounds are given on the command line.
DEFAULT_WINDOWS = {
    "mandelbrot": PlaneWindow.from_bounds(-2.25, 0.75, -1.5, 1.5),
    "julia": PlaneWindow.from_bounds(-2.0, 2.0, -1.5, 1.5),
}


def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set or one of its Julia sets and display it.')

    parser.add_argument('--kind', choices=['mandelbrot', 'julia'], default='mandelbrot',
                        help='which fractal to render')

    parser.add_argument('--width', type=int, dest='width', metavar='WIDTH', default=800,
                        help='canvas width in pixels')

    parser.add_argument('--height', type=int, dest='height', metavar='HEIGHT', default=600,
                        help='canvas height in pixels')

    parser.add_argument('--x-min', type=float, dest='x_min', metavar='X_MIN',
                        help='left edge of the window in the complex plane')
    parser.add_argument('--x-max', type=float, dest='x_max', metavar='X_MAX',
                        help='right edge of the window in the complex plane')
    parser.add_argument('--y-min', type=float, dest='y_min', metavar='Y_MIN',
                        help='imaginary coordinate of the first canvas row')
    parser.add_argument('--y-max', type=float, dest='y_max', metavar='Y_MAX',
                        help='imaginary coordinate of the last canvas row')

    parser.add_argument('--max-iterations', type=int, dest='max_iterations', metavar='MAX_ITERATIONS', default=1000,
                        help='iteration cap for the escape-time loop')

    parser.add_argument('--seed-x', type=float, dest='seed_x', default=0.0,
                        help='real part of the Julia seed')
    parser.add_argument('--seed-y', type=float, dest='seed_y', default=0.0,
                        help='imaginary part of the Julia seed')
    parser.add_argument('--seed-pixel', type=int, nargs=2, dest='seed_pixel', metavar=('ROW', 'COL'),
                        help='take the Julia seed from this pixel of the default Mandelbrot view at the same canvas size')

    parser.add_argument('--colormap', type=str, dest='colormap', metavar='COLORMAP', default='twilight_shifted',
                        help='matplotlib colormap used to build the palette (e.g. "viridis", "inferno")')
    parser.add_argument('--inside-color', type=str, default='#000000',
                        help='colour of points that never escape')
    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')
    parser.add_argument('--palette', type=str, dest='palette',
                        help='JSON file holding a list of [R, G, B] or [R, G, B, A] colours; overrides --colormap')

    parser.add_argument('--byte-order', choices=['little', 'big'], default=ByteOrder.native().value,
                        help='memory layout of the produced pixel buffer (default: native)')
    parser.add_argument('--alpha-from-palette', action='store_true',
                        help='use the 4th palette channel as alpha instead of fully opaque pixels')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_window(opt) -> PlaneWindow:
    default = DEFAULT_WINDOWS[opt.kind]
    return PlaneWindow.from_bounds(
        default.x_range.min if opt.x_min is None else opt.x_min,
        default.x_range.max if opt.x_max is None else opt.x_max,
        default.y_range.min if opt.y_min is None else opt.y_min,
        default.y_range.max if opt.y_max is None else opt.y_max,
    )


def resolve_seed(opt, canvas: CanvasDimensions) -> ComplexPoint:
    if opt.seed_pixel is None:
        return ComplexPoint(opt.seed_x, opt.seed_y)
    row, col = opt.seed_pixel
    return pixel_to_point(canvas, DEFAULT_WINDOWS['mandelbrot'], row, col)


def load_palette(opt):
    if opt.palette:
        return palette_from_json(Path(opt.palette).expanduser().read_text(encoding='utf-8'))
    return colormap_palette(opt.colormap, opt.max_iterations, inside_colour=opt.inside_color, invert=opt.invert)


def main():
    parser = build_parser()
    opt = parser.parse_args()

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    canvas = CanvasDimensions(opt.width, opt.height)
    window = resolve_window(opt)
    byte_order = ByteOrder(opt.byte_order)

    try:
        palette = load_palette(opt)
        log("Palette: %d colours" % len(palette))

        start = time.perf_counter()
        if opt.kind == 'julia':
            seed = resolve_seed(opt, canvas)
            log("Julia seed: (%r, %r)" % (seed.x, seed.y))
            buffer = render_julia(canvas, window, seed, opt.max_iterations, palette, byte_order,
                                  alpha_from_palette=opt.alpha_from_palette, device=DEVICE)
        else:
            buffer = render_mandelbrot(canvas, window, opt.max_iterations, palette, byte_order,
                                       alpha_from_palette=opt.alpha_from_palette, device=DEVICE)
        log("Rendered %dx%d %s image in %.2f seconds" % (canvas.width, canvas.height, opt.kind,
                                                         time.perf_counter() - start))

        surface = ImageSurface(canvas.width, canvas.height)
        surface.put_image_data(buffer, canvas, byte_order)
    except (OSError, UnicodeDecodeError) as exc:
        parser.error(f"cannot read palette: {exc}")
    except FractalError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)

    surface.show(title=f"{opt.kind} ({window.x_range.min}, {window.y_range.min}) - "
                       f"({window.x_range.max}, {window.y_range.max})")


if __name__ == '__main__':
    main()
