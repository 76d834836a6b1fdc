"""Script for stamping flyers locally

Running this script stamps a path-style tracking QR code onto N copies of a
flyer PDF and writes each copy plus the merged print file to an output
directory. Nothing is written to the database or object storage, which makes
it handy for checking QR placement before creating a real campaign.
"""

import argparse
import json
import logging
import time
from pathlib import Path

from flyer_pipeline.pdf_utils import QrBounds, merge_pdfs, stamp_qr_code
from qr_backend.tracking import validate_campaign_name


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    start_time = time.time()

    parser = argparse.ArgumentParser(
        description="Stamp tracking QR codes onto flyer copies locally."
    )
    parser.add_argument("pdf", type=Path, help="Path to the base flyer PDF.")
    parser.add_argument("campaign_name", type=str, help="Campaign name used in URLs.")
    parser.add_argument(
        "--bounds",
        required=True,
        help='QR rectangle in PDF points, e.g. \'{"x": 40, "y": 40, "width": 120, "height": 120}\'.',
    )
    parser.add_argument(
        "--base_url", default="http://localhost:8000", help="Tracking URL base."
    )
    parser.add_argument("--count", type=int, default=1, help="Number of flyers.")
    parser.add_argument(
        "--out", type=Path, default=Path("stamped_flyers"), help="Output directory."
    )
    args = parser.parse_args()

    name_error = validate_campaign_name(args.campaign_name)
    if name_error:
        parser.error(name_error)
    bounds = QrBounds.from_mapping(json.loads(args.bounds))
    pdf_bytes = args.pdf.read_bytes()
    args.out.mkdir(parents=True, exist_ok=True)

    print("🖨  Stamping flyers locally...")
    stamped = []
    for number in range(1, args.count + 1):
        url = f"{args.base_url.rstrip('/')}/r/{args.campaign_name}/{number}"
        flyer_pdf = stamp_qr_code(pdf_bytes, url, bounds)
        (args.out / f"flyer-{number}.pdf").write_bytes(flyer_pdf)
        stamped.append(flyer_pdf)
        print(f"  > flyer {number}: {url}")

    merged_path = args.out / f"{args.campaign_name}-all-flyers.pdf"
    merged_path.write_bytes(merge_pdfs(stamped))
    print(f"  > merged file: {merged_path}")
    print(f"Done in {time.time() - start_time:.2f}s")
