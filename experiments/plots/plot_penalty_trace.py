from __future__ import annotations

import argparse
import polars as pl
import matplotlib.pyplot as plt


def round_boundaries(df: pl.DataFrame) -> list[int]:
    """Row indices where outer_round changes (penalty weight grew)."""
    if "outer_round" not in df.columns or df.height == 0:
        return []
    rounds = df.get_column("outer_round").to_list()
    return [i for i in range(1, len(rounds)) if rounds[i] != rounds[i - 1]]


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--input", type=str, default="logs/penalty_trace.csv")
    parser.add_argument("--run_id", type=str, default=None)
    parser.add_argument("--out", type=str, default=None)
    args = parser.parse_args()

    df = pl.read_csv(args.input)
    if args.run_id is not None:
        df = df.filter(pl.col("run_id") == args.run_id)

    fig, ax1 = plt.subplots(figsize=(8, 4))
    ax1.plot(df["call"], df["energy"], label="energy", color="tab:blue")
    if "energy:objective" in df.columns:
        ax1.plot(df["call"], df["energy:objective"], label="objective", color="tab:green", alpha=0.7)
    ax1.set_yscale("symlog", linthresh=1e-6)
    ax1.set_xlabel("advance call")
    ax1.set_ylabel("energy")
    ax2 = ax1.twinx()
    ax2.plot(df["call"], df["penalty_weight"], label="penalty_weight", color="tab:red", alpha=0.5)
    ax2.set_yscale("log")
    ax2.set_ylabel("penalty weight")
    for idx in round_boundaries(df):
        ax1.axvline(df["call"][idx], color="gray", linestyle=":", linewidth=0.8)
    lines1, labels1 = ax1.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax1.legend(lines1 + lines2, labels1 + labels2, loc="upper right")
    ax1.set_title("Exterior-penalty trace")
    fig.tight_layout()
    if args.out:
        fig.savefig(args.out, dpi=150)
        print(f"Saved plot to {args.out}")
    else:
        plt.show()


if __name__ == "__main__":
    main()
