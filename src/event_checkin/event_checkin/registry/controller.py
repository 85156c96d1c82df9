from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request

from ..attendees.model import AttendanceRecord
from ..container import Container
from ..core.constants import CLEAR_ALL_CONFIRMATION
from ..core.enums import AttendeeFilter, ImportFormat, ScanStatus
from ..core.exceptions import AlreadyInStateError, NotFoundError, ParseError, ValidationError

logger = logging.getLogger(__name__)

# JSON field -> Registry.update_config keyword
CONFIG_FIELDS = {
    "eventName": "event_name",
    "eventDate": "event_date",
    "ticketPrice": "ticket_price",
    "growthxPrice": "growthx_price",
    "paymentLink": "payment_link",
}


def register(app: Flask, container: Container) -> None:
    registry = container.registry
    exports = container.export_service

    def json_endpoint(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ParseError as e:
                return jsonify({"success": False, "message": str(e), "totalParsed": e.total_parsed, "added": 0}), 400
            except ValidationError as e:
                return jsonify({"success": False, "message": str(e)}), 400
            except NotFoundError as e:
                return jsonify({"success": False, "message": str(e)}), 404
            except AlreadyInStateError as e:
                return jsonify({"success": False, "message": str(e)}), 409
            except Exception:
                logger.exception("Unhandled error in %s", view.__name__)
                return jsonify({"success": False, "message": "Internal error"}), 500

        return wrapper

    def _body() -> dict:
        data = request.get_json(silent=True)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def _record(r: AttendanceRecord | None):
        return r.to_dict() if r is not None else None

    @app.route("/api/config", methods=["GET"], endpoint="get_config")
    @json_endpoint
    def get_config():
        return jsonify({"success": True, "config": registry.get_config().to_dict()})

    @app.route("/api/config", methods=["PATCH", "PUT"], endpoint="update_config")
    @json_endpoint
    def update_config():
        data = _body()
        unknown = sorted(set(data) - set(CONFIG_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown config field(s): {', '.join(unknown)}")
        result = registry.update_config(**{CONFIG_FIELDS[k]: v for k, v in data.items()})
        return jsonify({"success": True, "config": result.config.to_dict(), "persisted": result.persisted})

    @app.route("/api/attendees", methods=["GET"], endpoint="list_attendees")
    @json_endpoint
    def list_attendees():
        try:
            status = AttendeeFilter(request.args.get("filter", AttendeeFilter.ALL.value))
        except ValueError:
            raise ValidationError("Unknown filter") from None
        rows = registry.list_attendees(search=request.args.get("search"), status=status)
        return jsonify({"success": True, "attendees": [r.to_dict() for r in rows]})

    @app.route("/api/attendees/lookup", methods=["GET"], endpoint="lookup_attendee")
    @json_endpoint
    def lookup_attendee():
        ticket = (request.args.get("ticket") or "").strip()
        if not ticket:
            raise ValidationError("Ticket ID is required")
        record = registry.find_attendee(ticket)
        if record is None:
            raise NotFoundError("Ticket not found")
        return jsonify({"success": True, "attendee": record.to_dict()})

    @app.route("/api/scan", methods=["POST"], endpoint="scan_ticket")
    @json_endpoint
    def scan_ticket():
        result = registry.scan(_body().get("ticket", ""))
        status_code = {
            ScanStatus.CHECKED_IN: 200,
            ScanStatus.ALREADY_CHECKED_IN: 409,
            ScanStatus.NOT_FOUND: 404,
        }[result.status]
        return jsonify(
            {
                "success": result.status == ScanStatus.CHECKED_IN,
                "status": result.status.value,
                "attendee": _record(result.record),
                "persisted": result.persisted,
            }
        ), status_code

    @app.route("/api/attendees/<attendee_id>/checkin", methods=["POST"], endpoint="check_in")
    @json_endpoint
    def check_in(attendee_id: str):
        result = registry.check_in(attendee_id)
        return jsonify({"success": True, "attendee": _record(result.record), "persisted": result.persisted})

    @app.route("/api/attendees/<attendee_id>/undo", methods=["POST"], endpoint="undo_check_in")
    @json_endpoint
    def undo_check_in(attendee_id: str):
        result = registry.undo_check_in(attendee_id)
        return jsonify({"success": True, "attendee": _record(result.record), "persisted": result.persisted})

    @app.route("/api/walkins", methods=["GET"], endpoint="list_walk_ins")
    @json_endpoint
    def list_walk_ins():
        return jsonify({"success": True, "walkIns": [r.to_dict() for r in registry.list_walk_ins()]})

    @app.route("/api/walkins", methods=["POST"], endpoint="add_walk_in")
    @json_endpoint
    def add_walk_in():
        data = _body()
        result = registry.add_walk_in(
            name=data.get("name", ""),
            quantity=data.get("quantity", 1),
            transaction_id=data.get("transactionId"),
        )
        return jsonify({"success": True, "attendee": _record(result.record), "persisted": result.persisted}), 201

    @app.route("/api/walkins/<attendee_id>", methods=["DELETE"], endpoint="remove_walk_in")
    @json_endpoint
    def remove_walk_in(attendee_id: str):
        result = registry.remove_walk_in(attendee_id)
        return jsonify({"success": True, "attendee": _record(result.record), "persisted": result.persisted})

    @app.route("/api/checkins/reset", methods=["POST"], endpoint="reset_check_ins")
    @json_endpoint
    def reset_check_ins():
        result = registry.reset_check_ins()
        return jsonify({"success": True, "reset": result.affected, "persisted": result.persisted})

    @app.route("/api/clear", methods=["POST"], endpoint="clear_all")
    @json_endpoint
    def clear_all():
        if str(_body().get("confirm") or "").strip() != CLEAR_ALL_CONFIRMATION:
            raise ValidationError(f"Type {CLEAR_ALL_CONFIRMATION} to confirm")
        persisted = registry.clear_all()
        return jsonify({"success": True, "persisted": persisted})

    @app.route("/api/import", methods=["POST"], endpoint="import_attendees")
    @json_endpoint
    def import_attendees():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("No file uploaded")
        fmt = ImportFormat.from_filename(upload.filename)
        result = registry.import_payload(upload.read(), fmt)
        body = {"success": True, "message": f"Imported {result.added} of {result.total_parsed} attendees"}
        body.update(result.to_dict())
        return jsonify(body)

    @app.route("/api/stats", methods=["GET"], endpoint="stats")
    @json_endpoint
    def stats():
        return jsonify({"success": True, "stats": registry.stats().to_dict()})

    @app.route("/api/export/<kind>", methods=["GET"], endpoint="export")
    @json_endpoint
    def export(kind: str):
        payload = exports.build(kind)
        return app.response_class(
            payload.content,
            mimetype=payload.mimetype,
            headers={"Content-Disposition": f"attachment; filename={payload.filename}"},
        )
