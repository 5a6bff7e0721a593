from __future__ import annotations

import os
from typing import List, Optional, Sequence

from werkzeug.utils import secure_filename

from ..integrations import ConsolidationResult, InputFile, consolidate

TEMPLATE_EXTENSIONS = (".xlsx", ".xlsm")


class TemplateNotFound(Exception):
    pass


def list_templates(template_folder: str) -> List[str]:
    if not os.path.isdir(template_folder):
        return []
    return sorted(
        os.path.splitext(name)[0]
        for name in os.listdir(template_folder)
        if name.lower().endswith(TEMPLATE_EXTENSIONS)
    )


def load_template(template_id: str, template_folder: str) -> bytes:
    name = secure_filename(template_id or "")
    if not name:
        raise TemplateNotFound("Selected consolidation template not found.")
    candidates = [name] if name.lower().endswith(TEMPLATE_EXTENSIONS) else [name + ext for ext in TEMPLATE_EXTENSIONS]
    for candidate in candidates:
        path = os.path.join(template_folder, candidate)
        if os.path.isfile(path):
            with open(path, "rb") as fh:
                return fh.read()
    raise TemplateNotFound("Selected consolidation template not found.")


def consolidate_files(
    input_files: Sequence[InputFile],
    file_name: str,
    division: str,
    ia: str,
    template_buffer: Optional[bytes] = None,
    template_id: Optional[str] = None,
    template_folder: Optional[str] = None,
    sheet_name: Optional[str] = None,
) -> ConsolidationResult:
    if template_buffer is None:
        if not template_id:
            raise ValueError("Either template_id or template_buffer must be provided")
        template_buffer = load_template(template_id, template_folder or "")

    return consolidate(
        template_buffer,
        input_files,
        output_name=file_name,
        default_division=division,
        default_ia=ia,
        sheet_name=sheet_name,
    )
