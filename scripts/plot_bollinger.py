"""
布林帶圖表腳本

載入 K 線（失敗或不足時使用合成數據），計算布林帶並輸出 PNG。

使用方法:
    # 使用配置檔（預設）
    python scripts/plot_bollinger.py

    # 指定數據來源（檔案或 URL）
    python scripts/plot_bollinger.py --data data/ohlcv.json

    # 覆蓋指標參數
    python scripts/plot_bollinger.py --length 30 --mult 2.5 --offset 3

    # 同時輸出布林帶數值表
    python scripts/plot_bollinger.py --csv

    # 預設帶時間戳，使用 --no-timestamp 可關閉
    python scripts/plot_bollinger.py --no-timestamp
"""
from __future__ import annotations
import argparse
from datetime import datetime
from pathlib import Path

from bollview.config import load_config
from bollview.chart.overlay import BollingerOverlay
from bollview.chart.plotting import plot_bollinger_chart
from bollview.data import load_candles_or_synthetic
from bollview.indicators.settings import SourceField


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="繪製 K 線 + 布林帶",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default="config/bollinger.yaml",
        help="配置檔路徑（預設: config/bollinger.yaml）"
    )
    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="K 線來源：JSON 檔案或 http(s) URL（覆蓋配置檔）"
    )
    parser.add_argument("--length", type=float, default=None, help="窗口長度")
    parser.add_argument("--mult", type=float, default=None, help="標準差倍數")
    parser.add_argument("--offset", type=int, default=None, help="平移 bar 數")
    parser.add_argument(
        "--source",
        type=str,
        choices=[s.value for s in SourceField],
        default=None,
        help="取值欄位"
    )
    parser.add_argument(
        "--no-background",
        action="store_true",
        help="不填充上下軌之間的區域"
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="輸出 PNG 路徑（預設: reports/bollinger/{timestamp}/bollinger.png）"
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        help="同時輸出布林帶數值表 (bands.csv)"
    )
    parser.add_argument(
        "--no-timestamp",
        action="store_true",
        help="不加時間戳（會覆蓋舊報告）"
    )
    return parser


def main(argv: list[str] | None = None) -> Path:
    args = build_parser().parse_args(argv)

    cfg = load_config(args.config)

    # 命令列參數優先
    changes = {}
    if args.length is not None:
        changes["length"] = args.length
    if args.mult is not None:
        changes["std_dev_multiplier"] = args.mult
    if args.offset is not None:
        changes["offset"] = args.offset
    if args.source is not None:
        changes["source"] = args.source
    inputs = cfg.indicator.with_changes(**changes)

    style = cfg.style
    if args.no_background:
        style = style.with_changes(show_background=False)

    data_cfg = cfg.data
    candles = load_candles_or_synthetic(
        args.data or data_cfg.source,
        min_candles=data_cfg.min_candles,
        synthetic_count=data_cfg.synthetic_count,
        interval_ms=data_cfg.synthetic_interval_ms,
        seed=data_cfg.seed,
    )

    overlay = BollingerOverlay(candles, inputs=inputs, style=style, enabled=True)

    # 確定輸出路徑
    timestamp_str = datetime.now().strftime("%Y%m%d_%H%M%S")
    if args.output:
        png_path = Path(args.output)
    elif args.no_timestamp:
        png_path = cfg.get_report_path("bollinger.png")
    else:
        png_path = cfg.get_report_path(f"{timestamp_str}/bollinger.png")

    plot_bollinger_chart(candles, overlay, save_path=png_path)

    defined = sum(p.is_defined for p in overlay.series)
    print(f"📊 BOLL({inputs.effective_length}, {float(inputs.std_dev_multiplier):g}) "
          f"offset={inputs.effective_offset} source={inputs.source.value}")
    print(f"🕯️  K 線: {len(candles)} 根，有效布林帶點: {defined}")
    print(f"🖼️  圖表: {png_path}")

    if args.csv:
        csv_path = png_path.with_name("bands.csv")
        overlay.to_frame().to_csv(csv_path)
        print(f"📄 數值表: {csv_path}")

    return png_path


if __name__ == "__main__":
    main()
