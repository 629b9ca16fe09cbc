import plotly.express as px
import pandas as pd

def export_miss_breakdown(rows, path: str):
    if not rows:
        with open(path, "w") as f:
            f.write("<h1>Miss Breakdown</h1><p>No data to display.</p>")
        return

    df = pd.DataFrame(rows)
    df['misses'] = pd.to_numeric(df['misses'], errors='coerce')
    df = df.dropna(subset=['misses'])
    df['series'] = df['cache'] + " " + df['direction']

    fig = px.bar(
        df,
        x="series",
        y="misses",
        color="category",
        barmode="group",
        hover_data=['cache', 'direction', 'category', 'misses'],
        title="Cache Miss Breakdown",
        labels={"series": "Cache / Access", "misses": "Misses", "category": "Miss Category"}
    )

    fig.update_layout(
        font=dict(family="Courier New, monospace", size=12),
        legend_title="Miss Category"
    )

    fig.write_html(path, include_plotlyjs="cdn", full_html=True)

def export_miss_breakdown_ascii(rows, width: int = 50):
    if not rows:
        return "No misses recorded."

    max_misses = max((row['misses'] for row in rows), default=0)
    if max_misses == 0:
        return "No misses recorded."

    scale = width / max_misses
    chart = "Cache Miss Breakdown (ASCII)\n"
    chart += ("-" * (width + 36)) + "\n"
    for row in rows:
        label = f"{row['cache']} {row['direction']} {row['category']}"
        bar = "#" * int(row['misses'] * scale)
        chart += f"{label:>32} |{bar} {row['misses']}\n"
    chart += ("-" * (width + 36)) + "\n"
    return chart
