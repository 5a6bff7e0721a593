# batch_consolidate.py
"""
Consolidate a folder of IFR workbooks into one copy of a template workbook.

Usage:
    python batch_consolidate.py path/to/template.xlsx path/to/ifr_folder
    python batch_consolidate.py template.xlsx ifr_folder --output "DIVISION 3" --division 3 --ia "SAMPLE IA"
"""

import argparse
import sys
from pathlib import Path

from consolidator.integrations import ConsolidationError, InputFile, consolidate

ALLOWED_EXTS = {".xlsx", ".xlsm"}


def collect_files(folder: Path):
    # skip Excel lock files ("~$name.xlsx")
    return [
        p for p in sorted(folder.iterdir())
        if p.suffix.lower() in ALLOWED_EXTS and not p.name.startswith("~$")
    ]


def run(template: Path, folder: Path, output: str = None, division: str = "", ia: str = "", tab: str = None,
        out_dir: Path = Path(".")) -> int:
    files = collect_files(folder)
    if not files:
        print("No IFR workbooks found in", folder)
        return 1

    print(f"Found {len(files)} files. Consolidating into {template.name} ...")
    inputs = [InputFile(p.name, p.read_bytes()) for p in files]
    try:
        result = consolidate(
            template.read_bytes(),
            inputs,
            output_name=output,
            default_division=division,
            default_ia=ia,
            sheet_name=tab,
        )
    except ConsolidationError as e:
        print(f"Consolidation failed: {e}")
        for d in getattr(e, "skipped_details", []):
            print(f"  [{d.file_name}] skipped: {d.reason}")
        return 2

    out_path = out_dir / result.output_name
    out_path.write_bytes(result.output_buffer)
    for d in result.skipped_details:
        print(f"  [{d.file_name}] skipped: {d.reason}")
    print(f"Consolidated {result.consolidated_count} file(s), skipped {len(result.skipped_details)}")
    print(f"Saved workbook to {out_path.resolve()}")
    return 0


# ---------------- CLI ----------------
def main(argv=None):
    parser = argparse.ArgumentParser(description="Consolidate IFR workbooks into a template.")
    parser.add_argument("template", type=Path)
    parser.add_argument("folder", type=Path)
    parser.add_argument("--output", default=None, help="output workbook name")
    parser.add_argument("--division", default="", help="default division code")
    parser.add_argument("--ia", default="", help="default IA name")
    parser.add_argument("--tab", default=None, help="template sheet to write into")
    args = parser.parse_args(argv)

    if not args.template.is_file():
        print("Template not found:", args.template)
        return 1
    if not args.folder.is_dir():
        print("Provided path is not a folder:", args.folder)
        return 1
    return run(args.template, args.folder, args.output, args.division, args.ia, args.tab)


if __name__ == "__main__":
    sys.exit(main())
