from typing import Dict, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd

from backend.logic.aggregation import TrendPoint

STATUS_COLORS = ["#FCD34D", "#14B8A6"]  # pending, completed


def trend_frame(points: Sequence[TrendPoint]) -> pd.DataFrame:
    """
    Revenue / costs / profit per bucket, oldest first.

    Indexed by bucket start date: chart axes sort a text index
    alphabetically, so month and week labels would come out of order.
    """
    df = pd.DataFrame(
        {
            "Revenue": [float(p.revenue) for p in points],
            "Costs": [float(p.costs) for p in points],
            "Profit": [float(p.profit) for p in points],
        },
        index=pd.DatetimeIndex([pd.Timestamp(p.start) for p in points], name="Period"),
    )
    return df


def status_pie(tally: Dict[str, int]):
    """Pie chart of pending vs completed orders. Caller closes the figure."""
    labels = ["Pending", "Completed"]
    values = [tally.get("pending", 0), tally.get("completed", 0)]

    fig, ax = plt.subplots(figsize=(4, 4))
    if sum(values) == 0:
        ax.text(0.5, 0.5, "No orders yet", ha="center", va="center")
        ax.axis("off")
        return fig

    ax.pie(
        values,
        labels=[f"{l} ({v})" for l, v in zip(labels, values)],
        colors=STATUS_COLORS,
        startangle=90,
        wedgeprops={"width": 0.45},
    )
    ax.set_title("Order Status")
    ax.axis("equal")
    return fig
