from __future__ import annotations

import io
import json
from datetime import datetime
from typing import Any, List

from flask import Blueprint, current_app, jsonify, request, send_file

from .integrations import InputFile, NothingConsolidatedError, TemplateUnreadableError
from .services.consolidation_service import TemplateNotFound, consolidate_files, list_templates
from .services.extraction_service import ExtractionFailed, extract as run_extract

bp = Blueprint("api", __name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _allowed_file(filename: str) -> bool:
    allowed = current_app.config.get("ALLOWED_EXTENSIONS", set())
    return "." in filename and filename.rsplit(".", 1)[1].lower() in allowed


def _skipped_json(details, limit: int) -> str:
    # header-safe: ASCII only, truncated
    return json.dumps(
        [d.model_dump(exclude_none=True) for d in details[:limit]],
        ensure_ascii=True,
    )


@bp.get("/health")
def health() -> Any:
    return jsonify({
        "status": "ok",
        "time": datetime.utcnow().isoformat() + "Z",
        "debug": bool(current_app.config.get("DEBUG", False)),
    })


@bp.get("/templates")
def templates_endpoint() -> Any:
    return jsonify({"templates": list_templates(current_app.config["TEMPLATE_FOLDER"])})


@bp.post("/extract")
def extract_endpoint() -> Any:
    try:
        if "file" not in request.files:
            return jsonify({"error": "file field missing"}), 400
        file = request.files["file"]
        if file.filename == "":
            return jsonify({"error": "empty filename"}), 400
        if not _allowed_file(file.filename):
            return jsonify({"error": "file type not allowed"}), 400

        extracted = run_extract(file.read(), file.filename)
        return jsonify({"extracted": extracted}), 200
    except ExtractionFailed as e:
        return jsonify({"error": str(e)}), 422
    except Exception as e:  # pragma: no cover
        current_app.logger.exception("/extract failed")
        return jsonify({"error": "internal_error", "detail": str(e)}), 500


@bp.post("/consolidate")
def consolidate_endpoint() -> Any:
    try:
        files = [f for f in request.files.getlist("files") if f.filename]
        single = request.files.get("file")
        if not files and single is not None and single.filename:
            files = [single]
        if not files:
            return jsonify({"error": "No IFR Excel files uploaded"}), 400

        rejected = [f.filename for f in files if not _allowed_file(f.filename)]
        if rejected:
            return jsonify({"error": "file type not allowed", "files": rejected}), 400

        template = request.files.get("template")
        template_id = (request.form.get("templateId") or "").strip()
        template_buffer = None
        if template is not None and template.filename:
            if not _allowed_file(template.filename):
                return jsonify({"error": "template file type not allowed"}), 400
            template_buffer = template.read()
        elif not template_id:
            return jsonify({"error": "No consolidation template uploaded"}), 400

        # filenames are kept as uploaded: the leading number is the file ID
        input_files: List[InputFile] = [InputFile(f.filename, f.read()) for f in files]

        result = consolidate_files(
            input_files,
            file_name=request.form.get("fileName") or current_app.config["DEFAULT_OUTPUT_NAME"],
            division=request.form.get("division") or current_app.config["DEFAULT_DIVISION"],
            ia=request.form.get("ia") or current_app.config["DEFAULT_IA"],
            template_buffer=template_buffer,
            template_id=template_id or None,
            template_folder=current_app.config["TEMPLATE_FOLDER"],
            sheet_name=(request.form.get("tabName") or "").strip() or None,
        )
    except NothingConsolidatedError as e:
        return jsonify({
            "error": str(e),
            "skippedDetails": [d.model_dump(exclude_none=True) for d in e.skipped_details],
        }), 400
    except TemplateNotFound as e:
        return jsonify({"error": str(e)}), 404
    except TemplateUnreadableError as e:
        current_app.logger.error("/consolidate: %s", e)
        return jsonify({"error": str(e)}), 500
    except Exception as e:  # pragma: no cover
        current_app.logger.exception("/consolidate failed")
        return jsonify({"error": "internal_error", "detail": str(e)}), 500

    current_app.logger.info(
        "/consolidate: %d consolidated, %d skipped -> %s",
        result.consolidated_count, len(result.skipped_details), result.output_name,
    )
    response = send_file(
        io.BytesIO(result.output_buffer),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=result.output_name,
    )
    response.headers["X-Consolidated-Count"] = str(result.consolidated_count)
    response.headers["X-Skipped-Count"] = str(len(result.skipped_details))
    response.headers["X-Skipped-Details"] = _skipped_json(
        result.skipped_details, current_app.config.get("SKIPPED_HEADER_LIMIT", 50)
    )
    return response
