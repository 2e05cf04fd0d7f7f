"""Static figures for the delivery market report."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Sequence

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from Delivery_analytics.channels import CHANNEL_COLORS, CHANNEL_NAMES
from Delivery_analytics.chart_data import chart_frame, dashboard_chart_data
from Delivery_analytics.metrics import AggregatedChannelMetric

sns.set_theme(style="whitegrid")

_PALETTE = {channel.value: color for channel, color in CHANNEL_COLORS.items()}


def _save_plot(fig: plt.Figure, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def channel_bar_plot(
    channel_data: Sequence[AggregatedChannelMetric],
    *,
    series: str,
    label: str,
    filename: str,
    output_dir: Path,
) -> Path | None:
    """Bar per channel for one chart series, in summary order."""

    frame = chart_frame(dashboard_chart_data(channel_data))
    frame = frame.loc[frame["series"] == series]
    if frame.empty:
        return None
    fig, ax = plt.subplots(figsize=(8, 5))
    palette = dict(zip(frame["channel"], frame["color"]))
    sns.barplot(data=frame, x="channel", y="value", hue="channel", palette=palette, legend=False, ax=ax)
    ax.set_xlabel("Channel")
    ax.set_ylabel(label)
    ax.set_title(f"{label} by channel")
    output_path = output_dir / "figures" / filename
    _save_plot(fig, output_path)
    return output_path


def market_share_plot(shares: pd.DataFrame, *, key_column: str, output_dir: Path) -> Path | None:
    """Stacked bars of channel share per period (or other key)."""

    if shares.empty or key_column not in shares.columns:
        return None
    frame = shares.set_index(key_column).reindex(columns=list(CHANNEL_NAMES), fill_value=0.0)
    fig, ax = plt.subplots(figsize=(10, 5))
    frame.plot(kind="bar", stacked=True, color=[_PALETTE[name] for name in frame.columns], width=0.8, ax=ax)
    ax.set_ylim(0, 100)
    ax.set_ylabel("Share of orders (%)")
    ax.set_xlabel("")
    ax.set_title("Market share over time")
    ax.legend(title="Channel", bbox_to_anchor=(1.02, 1), loc="upper left")
    ax.set_xticklabels(ax.get_xticklabels(), rotation=45, ha="right")
    output_path = output_dir / "figures" / "market_share.png"
    _save_plot(fig, output_path)
    return output_path


def generate_visuals(
    *,
    output_dir: Path,
    channel_data: Sequence[AggregatedChannelMetric],
    period_shares: pd.DataFrame,
    key_column: str = "key",
) -> Dict[str, str]:
    figures: Dict[str, str] = {}

    orders_path = channel_bar_plot(
        channel_data, series="orders", label="Orders", filename="channel_orders.png", output_dir=output_dir
    )
    if orders_path:
        figures["channel_orders"] = orders_path.name

    roas_path = channel_bar_plot(channel_data, series="roas", label="ROAS", filename="channel_roas.png", output_dir=output_dir)
    if roas_path:
        figures["channel_roas"] = roas_path.name

    marketing_path = channel_bar_plot(
        channel_data,
        series="total_marketing_vs_gross",
        label="Marketing spend (% of gross)",
        filename="channel_marketing_share.png",
        output_dir=output_dir,
    )
    if marketing_path:
        figures["channel_marketing_share"] = marketing_path.name

    share_path = market_share_plot(period_shares, key_column=key_column, output_dir=output_dir)
    if share_path:
        figures["market_share"] = share_path.name

    return figures
