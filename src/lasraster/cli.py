"""Command-line interface for the lasraster package."""

import argparse
import sys
from pathlib import Path

import numpy as np

from lasraster.config import NODATA, Function, Method, RasterConfig, Variable
from lasraster.exceptions import InternalError, LasRasterError
from lasraster.geometry.binning import PointBinner
from lasraster.geometry.builder import SurfaceBuilder
from lasraster.geometry.grid import RasterGrid
from lasraster.geometry.rasterize import RasterSampler
from lasraster.output.raster import RasterWriter
from lasraster.parsers.las import LasPointReader
from lasraster.utils.logging import get_logger, log_stage, setup_logging
from lasraster.utils.validation import (
    parse_extent,
    validate_classification,
    validate_input_file,
    validate_positive_float,
)


def _shared_arguments() -> argparse.ArgumentParser:
    """Arguments common to every rasterization method."""
    parent = argparse.ArgumentParser(add_help=False)

    parent.add_argument(
        "-i", "--input",
        type=Path,
        required=True,
        dest="input_file",
        help="Path to las/laz file",
    )
    parent.add_argument(
        "-r", "--res",
        type=float,
        required=True,
        dest="resolution",
        help="Resolution of the output raster",
    )
    parent.add_argument(
        "-c", "--class",
        type=int,
        dest="classification",
        help="Only use points with this LAS classification code",
    )
    parent.add_argument(
        "--var",
        type=str,
        choices=[v.value for v in Variable],
        default=Variable.Z.value,
        help="Variable to rasterize (default: z)",
    )
    parent.add_argument(
        "-e", "--extent",
        type=str,
        help=(
            "Extent of the output raster as minx,miny,minz,maxx,maxy,maxz or "
            "minx,miny,maxx,maxy (default: bounds of the source las/laz)"
        ),
    )
    parent.add_argument(
        "-n", "--nodata",
        type=float,
        default=NODATA,
        help=f"NoData value (default: {NODATA})",
    )
    parent.add_argument(
        "output_file",
        type=Path,
        help="Output raster path; the extension selects the raster driver",
    )

    verbosity = parent.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only report warnings and errors",
    )
    return parent


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="lasraster",
        description="Generates a raster from a las/laz file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lasraster bin -i cloud.laz -r 1.0 dem.tif
  lasraster bin -i cloud.laz -r 2.0 -f count --class 2 density.tif
  lasraster triangulate -i cloud.laz -r 0.5 -d 5.0 -b 2.0 dsm.tif
  lasraster triangulate -i cloud.laz -r 0.5 -d 5.0 -b 2.0 --var intensity int.tif
        """,
    )
    parent = _shared_arguments()
    subparsers = parser.add_subparsers(dest="method", required=True)

    bin_parser = subparsers.add_parser(
        Method.BIN.value,
        parents=[parent],
        help="Use raw point cloud values via binning",
    )
    bin_parser.add_argument(
        "-f", "--func",
        type=str,
        choices=[f.value for f in Function],
        default=Function.MEDIAN.value,
        help="Binning function (default: median)",
    )

    tri_parser = subparsers.add_parser(
        Method.TRIANGULATE.value,
        parents=[parent],
        help="Interpolate a triangulated surface swept from the top down",
    )
    tri_parser.add_argument(
        "-d", "--freeze-distance",
        type=float,
        required=True,
        help=(
            "Edges shorter than this distance are frozen once they fall behind "
            "the insertion buffer, blocking lower points from refining them"
        ),
    )
    tri_parser.add_argument(
        "-b", "--insertion-buffer",
        type=float,
        required=True,
        help="Elevation slack that keeps edges near the sweep front from freezing prematurely",
    )

    return parser.parse_args(args)


def build_config(parsed_args: argparse.Namespace) -> RasterConfig:
    """Validate parsed arguments and create the run configuration.

    Raises:
        ValidationError: If any argument is invalid.
    """
    validate_input_file(parsed_args.input_file)
    validate_positive_float(parsed_args.resolution, "Resolution")
    if parsed_args.classification is not None:
        validate_classification(parsed_args.classification)

    extent = parse_extent(parsed_args.extent) if parsed_args.extent else None
    method = Method(parsed_args.method)

    freeze_distance = insertion_buffer = None
    function = Function.MEDIAN
    if method == Method.TRIANGULATE:
        validate_positive_float(parsed_args.freeze_distance, "Freeze distance")
        validate_positive_float(parsed_args.insertion_buffer, "Insertion buffer")
        freeze_distance = parsed_args.freeze_distance
        insertion_buffer = parsed_args.insertion_buffer
    else:
        function = Function(parsed_args.func)

    return RasterConfig(
        input_file=parsed_args.input_file,
        output_file=parsed_args.output_file,
        resolution=parsed_args.resolution,
        method=method,
        variable=Variable(parsed_args.var),
        function=function,
        classification=parsed_args.classification,
        extent=extent,
        nodata=parsed_args.nodata,
        freeze_distance=freeze_distance,
        insertion_buffer=insertion_buffer,
        verbose=parsed_args.verbose,
    )


def run_rasterization(config: RasterConfig) -> np.ndarray:
    """Run the complete point cloud to raster workflow.

    Returns:
        The raster values that were written, shaped (height, width).
    """
    logger = get_logger(__name__)

    # Fail on an unknown output format before any processing
    writer = RasterWriter(nodata=config.nodata)
    writer.driver_for(config.output_file)

    with log_stage(logger, "Reading point cloud header"):
        reader = LasPointReader(config.input_file)

    extent = config.extent or reader.bounds.planar()
    grid = RasterGrid(extent, config.resolution)
    grid.validate()
    logger.info(
        f"Output raster: {grid.width}x{grid.height} cells at resolution {config.resolution}"
    )
    if extent.has_z:
        logger.info(f"Keeping points with elevation in [{extent.min_z}, {extent.max_z}]")

    if config.method == Method.BIN:
        binner = PointBinner(
            grid,
            function=config.function,
            variable=config.variable,
            classification=config.classification,
            nodata=config.nodata,
        )
        with log_stage(logger, "Binning points"):
            data = binner.bin(reader.points())
    elif config.method == Method.TRIANGULATE:
        builder = SurfaceBuilder(
            freeze_distance=config.freeze_distance,
            insertion_buffer=config.insertion_buffer,
            variable=config.variable,
            classification=config.classification,
            grid=grid,
        )
        with log_stage(logger, "Building triangulation"):
            tin = builder.build(reader.points())
        with log_stage(logger, "Sampling triangulation"):
            data = RasterSampler(tin, grid, nodata=config.nodata).sample()
    else:
        raise InternalError(f"Unknown rasterization method: {config.method}")

    with log_stage(logger, "Writing raster"):
        writer.write(config.output_file, grid, data)

    logger.info("Done!")
    return data


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parsed_args = parse_args(args)

    # Set up logging
    setup_logging(verbose=parsed_args.verbose, quiet=parsed_args.quiet)
    logger = get_logger(__name__)

    try:
        config = build_config(parsed_args)
        run_rasterization(config)
        return 0

    except InternalError as e:
        logger.error(f"Internal error, please report this as a bug: {e}")
        return 2
    except LasRasterError as e:
        logger.error(f"Rasterization error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
