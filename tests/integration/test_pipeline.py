# tests/integration/test_pipeline.py

import pytest
import numpy as np
import rasterio

from spatialio import cli
from spatialio.config import RasterIOOptions
from spatialio.raster import (
    Region,
    fetch,
    is_block_aligned,
    iter_blocks,
    open_raster,
    read_block,
    update,
    write_block
)

def test_blockwise_processing_pipeline(tmp_path, tiled_path, tiled_data):
    """
    Simulates a standard block-streaming workflow:
    1. Open a tiled source and create a tiled destination with the same grid.
    2. Process every natural block (halve the values) without resampling.
    3. Verify the destination through windowed and decimated reads.
    """
    out_path = tmp_path / "halved.tif"
    profile = dict(
        width=300, height=300, count=1, dtype='uint16',
        tiled=True, blockxsize=256, blockysize=256
    )

    visited = []
    with open_raster(tiled_path) as src, open_raster(out_path, "w", **profile) as dst:
        for (bx, by), region in iter_blocks(src.band(1)):
            assert is_block_aligned(src.band(1), region)
            block = read_block(src.band(1), bx, by)
            write_block(dst.band(1), bx, by, block // 2)
            visited.append((bx, by))

    assert visited == [(0, 0), (1, 0), (0, 1), (1, 1)]

    with open_raster(out_path) as ds:
        window = fetch(ds.band(1), region=Region(250, 250, 50, 50))
        overview = fetch(ds, bands=1, buffer_shape=(150, 150), dtype='float32')

    assert np.array_equal(window, tiled_data[250:, 250:] // 2)
    assert overview.shape == (150, 150)
    assert overview.dtype == np.float32
    assert np.array_equal(overview, (tiled_data // 2)[1::2, 1::2].astype('float32'))

def test_progress_over_multiband_update(raster_factory):
    path = raster_factory("bands.tif", np.zeros((4, 8, 8), 'int16'))
    seen = []
    options = RasterIOOptions(progress=lambda fraction: seen.append(fraction) or True)

    with open_raster(path, "r+") as ds:
        update(ds, np.arange(4, dtype='int16').reshape(4, 1, 1), options=options)
        result = fetch(ds)

    assert seen == [0.0, 0.25, 0.5, 0.75, 1.0]
    assert [int(result[k].max()) for k in range(4)] == [0, 1, 2, 3]
    assert [int(result[k].min()) for k in range(4)] == [0, 1, 2, 3]

def test_cli_info(tiled_path, capsys):
    cli.main(["info", str(tiled_path)])
    out = capsys.readouterr().out

    assert "size: 300 x 300, bands: 1" in out
    assert "band 1: uint16, block 256 x 256 (tiled), grid 2 x 2" in out

def test_cli_extract(quadrant_path, tmp_path):
    out_path = tmp_path / "extract" / "small.tif"

    cli.main([
        "extract", str(quadrant_path), str(out_path),
        "--window", "0", "0", "4", "4",
        "--size", "2", "2",
        "--dtype", "uint8",
        "--resampling", "average"
    ])

    with rasterio.open(out_path) as dst:
        assert (dst.count, dst.height, dst.width) == (1, 2, 2)
        assert dst.dtypes[0] == 'uint8'
        assert dst.read(1).tolist() == [[1, 2], [3, 4]]
        # pixel size doubles when the window is decimated by two
        assert dst.transform.a == pytest.approx(2.0)
        assert dst.transform.e == pytest.approx(-2.0)
        assert dst.crs.to_epsg() == 32619

def test_cli_extract_bands_subset(three_band_path, tmp_path):
    out_path = tmp_path / "subset.tif"

    cli.main([
        "extract", str(three_band_path), str(out_path),
        "--window", "1", "1", "2", "2",
        "--bands", "3", "1"
    ])

    with rasterio.open(out_path) as dst:
        assert dst.count == 2
        assert np.all(dst.read(1) == 30)
        assert np.all(dst.read(2) == 10)

def test_cli_extract_bad_window_exits(ramp_path, tmp_path):
    with pytest.raises(SystemExit) as exit_info:
        cli.main([
            "extract", str(ramp_path), str(tmp_path / "never.tif"),
            "--window", "6", "0", "4", "4"
        ])

    assert exit_info.value.code == 1
    assert not (tmp_path / "never.tif").exists()

def test_cli_extract_rejects_unknown_dtype(ramp_path, tmp_path, capsys):
    with pytest.raises(SystemExit) as exit_info:
        cli.main([
            "extract", str(ramp_path), str(tmp_path / "never.tif"),
            "--window", "0", "0", "2", "2",
            "--dtype", "foo"
        ])

    assert exit_info.value.code == 2
    assert "invalid choice" in capsys.readouterr().err
    assert not (tmp_path / "never.tif").exists()
