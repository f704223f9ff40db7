from __future__ import annotations

import typer
from typing import Optional

from larhits.vis.hdf import save_event_png

app = typer.Typer(help="larhits visualization tools")

@app.command("hits-to-png")
def hits_to_png(
    h5_path: str = typer.Argument(..., help="Path to HDF5 file written by the larhits pipeline"),
    event: int = typer.Option(0, "--event", "-e", help="Stored event position"),
    out: Optional[str] = typer.Option(None, "--out", "-o", help="Output PNG path (defaults to file_eventN.png)"),
):
    """Render the U/V/W hits of one stored event to a PNG."""
    out_png = save_event_png(h5_path, event=event, out_png=out)
    typer.echo(f"Wrote {out_png}")

if __name__ == "__main__":
    app()
