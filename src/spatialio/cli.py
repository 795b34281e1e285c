# src/spatialio/cli.py

import argparse
import logging
import sys
from typing import List, Optional

from affine import Affine

from spatialio.config import RasterIOOptions
from spatialio.exceptions import SpatialIOError
from spatialio.raster import BlockGrid, Region, fetch, open_raster, update
from spatialio.raster.dtypes import PixelType
from spatialio.raster.resampling import ResamplingKernel

log = logging.getLogger(__name__)

def setup_logging(level: int = logging.INFO) -> None:
    """
    Configures the standard logging format and level for the command-line interface.

    Args:
        level (int): The logging threshold level.
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

def show_info(path: str) -> None:
    """
    Prints the size, band types and block layout of a raster.

    Args:
        path (str): Raster file to describe.
    """
    with open_raster(path) as ds:
        print(f"{ds.name}")
        print(f"  size: {ds.width} x {ds.height}, bands: {ds.count}")
        for band in ds.bands():
            grid = BlockGrid.of(band)
            layout = "tiled" if band.structure.is_tiled else "striped"
            print(
                f"  band {band.index}: {band.dtype}, block {grid.block_width} x {grid.block_height} "
                f"({layout}), grid {grid.columns} x {grid.rows}"
            )

def extract_window(
    src_path: str,
    dst_path: str,
    window: List[int],
    size: Optional[List[int]] = None,
    bands: Optional[List[int]] = None,
    dtype: Optional[str] = None,
    resampling: Optional[str] = None
) -> None:
    """
    Reads a window of a raster, optionally resampled and converted, and saves it as a GeoTIFF.

    The output georeferencing is the window's transform scaled to the output size.

    Args:
        src_path (str): Source raster.
        dst_path (str): Output GeoTIFF path.
        window (List[int]): x_offset, y_offset, width, height of the region.
        size (List[int], optional): Output width and height. Defaults to the window size.
        bands (List[int], optional): 1-based bands to extract. Defaults to all bands.
        dtype (str, optional): Output pixel type. Defaults to the first band's type.
        resampling (str, optional): Kernel used when `size` differs from the window.
    """
    region = Region(*window)
    options = RasterIOOptions(resampling=ResamplingKernel.parse(resampling) if resampling else None)

    with open_raster(src_path) as src:
        buffer_shape = tuple(size) if size else None
        data = fetch(
            src,
            bands=list(bands) if bands else None,
            region=region,
            buffer_shape=buffer_shape,
            dtype=dtype,
            options=options
        )

        out_count, out_height, out_width = data.shape
        source = src.source
        transform = source.window_transform(region.to_window()) * Affine.scale(
            region.x_size / out_width, region.y_size / out_height
        )
        profile = {
            "driver": "GTiff",
            "width": out_width,
            "height": out_height,
            "count": out_count,
            "dtype": data.dtype.name,
            "crs": source.crs,
            "transform": transform,
            "nodata": source.nodata,
        }

    log.info(f"Extracting {region} of {src_path} as {out_width}x{out_height}x{out_count} {data.dtype}")

    driver = profile.pop("driver")
    with open_raster(dst_path, "w", driver=driver, **profile) as dst:
        update(dst, data)

    log.info(f"Saved {dst_path}")

def main(argv: Optional[List[str]] = None) -> None:
    """
    Parses command-line arguments and routes execution to the matching subcommand.
    """
    parser = argparse.ArgumentParser(
        prog="spatialio",
        description="Windowed raster access utilities"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enables debug logging of every transfer."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser(
        "info",
        help="Prints the size, band types and block layout of a raster."
    )
    info_parser.add_argument("path", type=str, help="Raster file to describe.")

    extract_parser = subparsers.add_parser(
        "extract",
        help="Reads a window of a raster and saves it as a GeoTIFF."
    )
    extract_parser.add_argument("src", type=str, help="Source raster.")
    extract_parser.add_argument("dst", type=str, help="Output GeoTIFF.")
    extract_parser.add_argument(
        "--window",
        type=int,
        nargs=4,
        required=True,
        metavar=("X", "Y", "WIDTH", "HEIGHT"),
        help="Pixel offset and size of the region to read."
    )
    extract_parser.add_argument(
        "--size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        help="Output size. The window is resampled when it differs."
    )
    extract_parser.add_argument(
        "--bands",
        type=int,
        nargs="+",
        help="1-based bands to extract. Defaults to all bands."
    )
    extract_parser.add_argument(
        "--dtype",
        choices=[t.value for t in PixelType],
        help="Output pixel type (uint8, int16, float32, ...)."
    )
    extract_parser.add_argument(
        "--resampling",
        choices=[k.value for k in ResamplingKernel],
        help="Resampling kernel. Defaults to nearest or the configured environment default."
    )

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command == "info":
            show_info(args.path)
        elif args.command == "extract":
            extract_window(
                args.src,
                args.dst,
                window=args.window,
                size=args.size,
                bands=args.bands,
                dtype=args.dtype,
                resampling=args.resampling
            )
    except (SpatialIOError, FileNotFoundError, MemoryError) as e:
        logging.error(f"{args.command} failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
