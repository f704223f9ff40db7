from __future__ import annotations

from itertools import islice
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple
import typer

from larhits.config.load import load_config
from larhits.config.reco import steering_for_option
from larhits.config.schemas import Config
from larhits.errors import StopProcessingError
from larhits.geometry.views import ViewGeometry, views_from_geometry
from larhits.io.adapters import make_adapter
from larhits.io.hit_store import write_init, write_event_hits
from larhits.physics.calo_hits import CaloHit, to_calo_hits
from larhits.physics.downsample import DownsampleSettings, downsample_event
from larhits.physics.hits import DepositEvent, ProtoHit, ViewTag
from larhits.vis.hdf import save_event_png


def _iter_source_events(cfg: Config) -> Iterable[DepositEvent]:
    """
    Event source for the run: the configured adapter over cfg.io.input_path,
    with [run].skip_events dropped from the front and at most [run].n_events
    yielded (all when negative).
    """
    adapter = make_adapter(cfg.io.adapter)
    events = adapter.iter_events(cfg.io.input_path)
    start = cfg.run.skip_events
    stop = None if cfg.run.n_events < 0 else start + cfg.run.n_events
    return islice(events, start, stop)


def process_event(
    event: DepositEvent,
    views: Mapping[ViewTag, ViewGeometry],
    settings: DownsampleSettings,
) -> List[ProtoHit]:
    """Finished U, V, W hits for one event."""
    return downsample_event(event.deposits, views, settings)


def run_pipeline(
    cfg_path: str,
    *,
    n_events: Optional[int] = None,
    skip_events: Optional[int] = None,
) -> Path:
    """
    Run the hit-making pipeline from a TOML config file.

    CLI flags (--n-events/--skip) override the corresponding [run] fields
    when not None.

    Returns
    -------
    Path to written HDF5 file.

    Raises
    ------
    StopProcessingError
        on a fatal configuration or hit-consistency condition. Hits of the
        events completed before the failure are still written.
    """
    cfg = load_config(cfg_path)

    # ---- apply CLI overrides on top of TOML ----
    if n_events is not None:
        cfg.run.n_events = n_events
    if skip_events is not None:
        cfg.run.skip_events = skip_events

    diag_level = cfg.run.diagnostics_level

    if diag_level >= 1:
        print(f"[run] config = {cfg_path}")
        print(f"[run] n_events={cfg.run.n_events} skip_events={cfg.run.skip_events} "
              f"reco={cfg.reco.option} drift_window={cfg.downsample.drift_window}")
        print(f"[run] input={cfg.io.input_path} -> output={cfg.io.output_path}")

    views = views_from_geometry(cfg.geometry, cfg.downsample.epsilon)
    steering = steering_for_option(cfg.reco.option)
    settings = DownsampleSettings.from_cfg(cfg.downsample)
    if diag_level >= 2:
        for tag, view in views.items():
            print(f"[run] view {tag.name}: pitch={view.wire_pitch_cm} angle={view.wire_angle_rad}")
        print(f"[run] steering = {steering.as_dict()}")

    # HDF5 output
    out_path = Path(cfg.io.output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    f = write_init(str(out_path), cfg_path, cfg, views, steering)

    results: List[Tuple[DepositEvent, List[CaloHit]]] = []
    n_deposits = 0
    try:
        for event in _iter_source_events(cfg):
            if cfg.run.display_event_number:
                print(f"\n   PROCESSING EVENT: {event.index}\n")

            hits = process_event(event, views, settings)
            results.append((event, to_calo_hits(hits)))
            n_deposits += len(event.deposits)

            if cfg.run.print_status:
                counts = {tag.name: sum(1 for h in hits if h.view is tag) for tag in ViewTag}
                print(f"[event {event.index}] deposits={len(event.deposits)} "
                      f"hits U={counts['U']} V={counts['V']} W={counts['W']}")
        if diag_level >= 1:
            print("[run] All event files processed")
    finally:
        write_event_hits(f, results)
        f.close()

    if diag_level >= 1:
        n_hits = sum(len(h) for _, h in results)
        print(f"[pipeline] {len(results)} events, {n_deposits} deposits -> {n_hits} hits")

    # Optional PNG export
    if cfg.vis.export_png_on_write and results:
        try:
            out_png = save_event_png(str(out_path), event=cfg.vis.event)
            if diag_level >= 1:
                print(f"[pipeline] Wrote PNG {out_png} for event {cfg.vis.event}")
        except (KeyError, OSError) as e:
            if diag_level >= 1:
                print(f"[pipeline] PNG export failed: {e!r}")

    return out_path


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

app = typer.Typer(help="Project and downsample simulated TPC deposits into U/V/W hits (larhits.pipelines.core)")


@app.command()
def main(
    cfg_path: str = typer.Argument(
        ...,
        help="Path to TOML config file",
    ),
    n_events: Optional[int] = typer.Option(
        None,
        "--n-events",
        "-n",
        help="Number of events to process; overrides [run].n_events (-1 = all)",
    ),
    skip_events: Optional[int] = typer.Option(
        None,
        "--skip",
        "-s",
        min=0,
        help="Number of events to skip; overrides [run].skip_events",
    ),
):
    """
    Run the larhits pipeline for a single config.
    """
    try:
        out_path = run_pipeline(cfg_path, n_events=n_events, skip_events=skip_events)
    except StopProcessingError as exc:
        # Exit gracefully
        typer.echo(exc.description)
        raise typer.Exit(code=0)
    typer.echo(str(out_path))


if __name__ == "__main__":
    app()
