# app.py
import logging
import math

from flask import Flask, request, jsonify
from flask_cors import CORS
from sqlalchemy import func

from config import LOG_LEVEL, HISTORY_PAGE_SIZE, MAX_UPLOAD_SIZE_MB
from db import init_db, SessionLocal, AnalysisRecord
from imaging import extract_metadata, MetadataUnavailableError
from materials import MATERIAL_DATABASE
from models import ImageMetadata
from scoring import analyze_material, estimate_dimensions
from suggestions import llm_supplement

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)-12s - %(levelname)-8s - %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

METADATA_FIELDS = ("width", "height", "file_size_kb", "color_count")
MAX_HISTORY_LIMIT = 100

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_SIZE_MB * 1024 * 1024
CORS(app)

# Ensure tables exist on startup (no-op if they already do)
init_db()


@app.errorhandler(413)
def payload_too_large(_error):
    return jsonify({
        "error": "payload_too_large",
        "details": [f"Uploads are limited to {MAX_UPLOAD_SIZE_MB} MB."]
    }), 413


def parse_positive_int(raw_value, default):
    """Parse a query-string integer, falling back to `default` on junk or values < 1."""
    try:
        parsed_value = int(raw_value)
    except (TypeError, ValueError):
        return default
    return parsed_value if parsed_value >= 1 else default


def read_metadata():
    """
    Work out the image metadata for POST /analysis.

    Returns:
        (metadata, product_name, errors)
        metadata is None when an uploaded photo could not be decoded; the
        scorer then uses its fallbacks instead of failing the request.
    """
    uploaded_image = request.files.get("image")
    if uploaded_image is not None:
        product_name = request.form.get("product_name", "").strip()
        try:
            return extract_metadata(uploaded_image.stream), product_name, []
        except MetadataUnavailableError as exc:
            logger.warning("Could not read metadata from upload %r: %s", uploaded_image.filename, exc)
            return None, product_name, []

    request_data = request.get_json(silent=True) or {}
    if not isinstance(request_data, dict):
        request_data = {}
    product_name = str(request_data.get("product_name", "")).strip()
    if not any(field_name in request_data for field_name in METADATA_FIELDS):
        return None, product_name, ["Provide an 'image' upload or a JSON body with width, height, file_size_kb and color_count."]

    metadata = ImageMetadata.from_dict(request_data)
    return metadata, product_name, metadata.validate()


@app.route("/analysis", methods=["POST"])
def analyze():
    """
    POST /analysis

    Either a multipart upload:
      image=<file>, product_name=<optional text>

    or a JSON body with metadata measured elsewhere:
    {
      "product_name": "Desk lamp",
      "width": 3000,
      "height": 1000,
      "file_size_kb": 2500,
      "color_count": 2
    }

    Response (201):
    {
      "id": 7,
      "product_name": "Desk lamp",
      "material": "metal",
      "size": "large",
      "dimensions": {"width": 3000, "height": 1000},
      "impact_score": 7.9,
      "emissions_kg": 279,
      "recommendations": [{"category": ..., "title": ..., "description": ..., "impact_points": ...}, ...],
      "ai_insights": [...],
      "used_fallback": false
    }
    """
    metadata, product_name, validation_errors = read_metadata()
    if validation_errors:
        return jsonify({
            "error": "validation_error",
            "details": validation_errors
        }), 400

    score_result = analyze_material(metadata)
    size_estimate = estimate_dimensions(metadata)
    used_fallback = metadata is None

    llm_summary_text = (
        f"{product_name or 'Unnamed product'}: "
        f"material={score_result.material}, "
        f"size={score_result.size.value}, "
        f"impact score={score_result.impact_score}/10, "
        f"emissions={score_result.emissions_kg} kg CO2e"
    )
    ai_insights = llm_supplement(llm_summary_text)

    with SessionLocal() as db_session:
        db_record = AnalysisRecord(
            product_name=product_name,
            material=score_result.material,
            size=score_result.size.value,
            width=size_estimate.width,
            height=size_estimate.height,
            file_size_kb=metadata.file_size_kb if metadata else None,
            color_count=metadata.color_count if metadata else None,
            impact_score=score_result.impact_score,
            emissions_kg=score_result.emissions_kg,
            recommendations=[rec.to_dict() for rec in score_result.recommendations],
            ai_insights=ai_insights,
            used_fallback=used_fallback,
        )
        db_session.add(db_record)
        db_session.commit()
        record_id = db_record.id

    logger.info(
        "Stored analysis %s: %s/%s impact=%s emissions=%skg",
        record_id, score_result.material, score_result.size.value,
        score_result.impact_score, score_result.emissions_kg,
    )

    response_body = score_result.to_dict()
    response_body.update({
        "id": record_id,
        "product_name": product_name,
        "dimensions": size_estimate.dimensions(),
        "ai_insights": ai_insights,
        "used_fallback": used_fallback,
    })
    return jsonify(response_body), 201


@app.route("/history", methods=["GET"])
def history():
    """
    GET /history?page=1&limit=10

    Returns stored analyses, newest first, with pagination info:
    {
      "history": [ {...record...}, ... ],
      "pagination": {"total": 27, "page": 1, "pages": 3, "limit": 10}
    }
    """
    page = parse_positive_int(request.args.get("page"), 1)
    limit = min(parse_positive_int(request.args.get("limit"), HISTORY_PAGE_SIZE), MAX_HISTORY_LIMIT)

    with SessionLocal() as db_session:
        total = int(db_session.query(func.count(AnalysisRecord.id)).scalar() or 0)
        history_rows = (
            db_session
            .query(AnalysisRecord)
            .order_by(AnalysisRecord.created_at.desc(), AnalysisRecord.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        history_payload = [row.to_dict() for row in history_rows]

    return jsonify({
        "history": history_payload,
        "pagination": {
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit),
            "limit": limit,
        },
    }), 200


@app.route("/history/<int:record_id>", methods=["GET"])
def history_detail(record_id):
    """GET /history/<id>: a single stored analysis, or 404."""
    with SessionLocal() as db_session:
        db_record = db_session.get(AnalysisRecord, record_id)
        if db_record is None:
            return jsonify({"error": "not_found", "details": [f"No analysis with id {record_id}."]}), 404
        return jsonify(db_record.to_dict()), 200


@app.route("/analysis-summary", methods=["GET"])
def analysis_summary():
    """
    GET /analysis-summary

    Aggregates over every stored analysis:
    {
      "total_analyses": 12,
      "average_impact_score": 5.42,
      "total_emissions_kg": 1830,
      "materials": {"metal": 4, "polymer": 8},
      "sizes": {"large": 3, "medium": 9},
      "top_recommendations": ["Extended lifecycle practices", ...]
    }
    """
    with SessionLocal() as db_session:
        total_analyses = int(db_session.query(func.count(AnalysisRecord.id)).scalar() or 0)

        average_impact = float(
            db_session.query(func.avg(AnalysisRecord.impact_score)).scalar() or 0.0
        )
        total_emissions = int(
            db_session.query(func.sum(AnalysisRecord.emissions_kg)).scalar() or 0
        )

        material_counts = dict(
            db_session
            .query(AnalysisRecord.material, func.count(AnalysisRecord.id))
            .group_by(AnalysisRecord.material)
            .all()
        )
        size_counts = dict(
            db_session
            .query(AnalysisRecord.size, func.count(AnalysisRecord.id))
            .group_by(AnalysisRecord.size)
            .all()
        )

        # Count recommendation titles across every stored analysis
        title_frequency_map = {}
        for (recommendation_list,) in db_session.query(AnalysisRecord.recommendations).all():
            for recommendation in recommendation_list or []:
                title = recommendation.get("title")
                if title:
                    title_frequency_map[title] = title_frequency_map.get(title, 0) + 1

    sorted_titles = sorted(title_frequency_map.items(), key=lambda kv: kv[1], reverse=True)

    return jsonify({
        "total_analyses": total_analyses,
        "average_impact_score": round(average_impact, 2),
        "total_emissions_kg": total_emissions,
        "materials": material_counts,
        "sizes": size_counts,
        "top_recommendations": [title for title, _freq in sorted_titles[:5]],
    }), 200


@app.route("/materials", methods=["GET"])
def materials():
    """GET /materials: the static material property table, in classifier order."""
    return jsonify([
        {
            "material": material,
            "impact": profile.impact,
            "carbon_release": profile.carbon_release,
            "recycle_rating": profile.recycle_rating,
            "sustainability_index": profile.sustainability_index,
        }
        for material, profile in MATERIAL_DATABASE.items()
    ]), 200


if __name__ == "__main__":
    # NOTE: debug=True is ONLY for local dev; turn it off in prod
    app.run(host="0.0.0.0", port=5055, debug=True)
