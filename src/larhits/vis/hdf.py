import matplotlib.pyplot as plt
import numpy as np
from pathlib import Path

from larhits.io.hit_store import read_event_hits
from larhits.physics.hits import ViewTag


def save_event_png(h5_path: str, event: int = 0, out_png: str | None = None):
    hits = read_event_hits(h5_path, event)

    if out_png is None:
        out_png = str(Path(h5_path).with_name(f"{Path(h5_path).stem}_event{event}.png"))

    fig, axes = plt.subplots(1, 3, figsize=(12, 4), sharey=True)
    for ax, tag in zip(axes, ViewTag):
        sel = [h for h in hits if h.view is tag]
        wire = np.array([h.wire for h in sel])
        drift = np.array([h.drift for h in sel])
        energy = np.array([h.energy for h in sel])
        sc = ax.scatter(wire, drift, c=energy, s=6, cmap="viridis")
        ax.set_title(f"{tag.name} view ({len(sel)} hits)")
        ax.set_xlabel("wire [cm]")
        if len(sel):
            fig.colorbar(sc, ax=ax)
    axes[0].set_ylabel("drift [cm]")
    fig.suptitle(Path(h5_path).name + f" : event {event}")
    fig.tight_layout()
    fig.savefig(out_png, dpi=150)
    plt.close(fig)
    return out_png
