#!/usr/bin/env python3
"""MagicTree 模型下载脚本

下载 MediaPipe 手部关键点模型到 weights/ 目录。
"""

import argparse
import sys
from pathlib import Path
from urllib.request import urlretrieve

MODEL_NAME = "hand_landmarker.task"
MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)


def download_progress(block_num, block_size, total_size):
    """显示下载进度"""
    downloaded = block_num * block_size
    percent = min(downloaded * 100 / total_size, 100) if total_size > 0 else 0
    filled = int(40 * percent / 100)
    bar = "█" * filled + "░" * (40 - filled)
    print(f"\r  [{bar}] {percent:.1f}%", end="", flush=True)


def download_landmarker(weights_dir: Path, force: bool = False) -> bool:
    """下载手部关键点模型

    Args:
        weights_dir: 权重目录
        force: 是否强制重新下载

    Returns:
        bool: 是否成功
    """
    file_path = weights_dir / MODEL_NAME
    if file_path.exists() and not force:
        print(f"✓ {MODEL_NAME} 已存在，跳过下载")
        return True

    print(f"📦 下载: {MODEL_NAME}")
    print(f"🔗 来源: {MODEL_URL}")

    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    try:
        urlretrieve(MODEL_URL, temp_path, reporthook=download_progress)
        print()
        temp_path.rename(file_path)
        print(f"✅ 下载完成: {file_path}")
        return True
    except KeyboardInterrupt:
        print(f"\n⚠️  下载被中断: {MODEL_NAME}")
        if temp_path.exists():
            temp_path.unlink()
        return False
    except OSError as e:
        print(f"\n❌ 下载失败: {MODEL_NAME}")
        print(f"   错误: {e}")
        if temp_path.exists():
            temp_path.unlink()
        return False


def main():
    parser = argparse.ArgumentParser(description="MagicTree 模型下载工具")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("weights"),
        help="模型保存目录（默认: weights/）",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="强制重新下载已存在的文件",
    )
    args = parser.parse_args()

    args.output_dir.mkdir(parents=True, exist_ok=True)
    if not download_landmarker(args.output_dir, args.force):
        return 1

    print("\n🚀 现在可以运行 MagicTree 了：")
    print("   magictree")
    print("   python -m magictree.scripts.preview_gestures")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n⚠️  程序被用户中断")
        sys.exit(130)
