# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import sys
from flask import Flask, jsonify, request, send_from_directory
from flask_apscheduler import APScheduler
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge
from ..core.builder import ItemBuilder
from ..core.config import Config
from ..core.models import UploadedPart, entries_to_list, entry_to_dict
from ..infrastructure.db.database import CatalogFile
from ..infrastructure.db.repository import CatalogRepository
from ..infrastructure.storage.asset_store import AssetStore
from ..services.audit_service import AuditService
from ..services.catalog_service import CatalogService, OperationResult, OperationStatus
from ..services.deletion_service import DeletionReconciler
from .network import local_addresses

STATUS_CODES = {
    OperationStatus.OK: 200,
    OperationStatus.NOT_FOUND: 404,
    OperationStatus.REJECTED: 413,
    OperationStatus.FAILED: 500,
}

FORM_FIELDS = ("title", "category", "type")


class Server:
    def __init__(self, config_path: str = "config.yaml"):
        # Configure logging
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[logging.StreamHandler(sys.stdout)]
        )
        self.logger = logging.getLogger("media_catalog.server.app")

        self.config = Config.load(config_path)
        if self.config.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        self.public_dir = self.config.public_dir.resolve()
        self.app = Flask(__name__, static_folder=str(self.public_dir), static_url_path="")
        if self.config.max_request_bytes:
            self.app.config["MAX_CONTENT_LENGTH"] = self.config.max_request_bytes
        self.scheduler = APScheduler()

        # Infrastructure
        self.catalog_repo = CatalogRepository(CatalogFile(self.config.data_file))
        self.asset_store = AssetStore(
            self.config.uploads_dir,
            url_prefix=self.config.uploads_url_prefix,
            max_upload_bytes=self.config.max_upload_bytes,
        )
        self.asset_store.ensure_buckets()

        # Services
        self.builder = ItemBuilder(self.config.episode_title_template)
        self.reconciler = DeletionReconciler(self.config.uploads_dir, self.config.uploads_url_prefix)
        self.catalog_service = CatalogService(
            self.config, self.catalog_repo, self.asset_store, self.builder, self.reconciler
        )
        self.audit_service = AuditService(self.config, self.catalog_repo, self.asset_store, self.reconciler)

        self._setup_routes()
        self._setup_scheduler()

    def _setup_routes(self):
        uploads_root = self.asset_store.uploads_dir.resolve()
        uploads_prefix = self.asset_store.url_prefix

        @self.app.after_request
        def add_cors_headers(resp):
            resp.headers["Access-Control-Allow-Origin"] = self.config.cors_origin
            resp.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
            resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
            return resp

        @self.app.errorhandler(RequestEntityTooLarge)
        def request_too_large(e):
            limit = self.config.max_request_bytes
            return jsonify({"success": False, "error": f"Request exceeds the size limit of {limit} bytes"}), 413

        @self.app.route("/")
        def index():
            if (self.public_dir / "index.html").is_file():
                return send_from_directory(self.public_dir, "index.html")
            return jsonify({"service": "media-catalog", "catalog": "/api/movies"})

        @self.app.route(f"{uploads_prefix}/<path:filename>")
        def uploaded_file(filename):
            return send_from_directory(uploads_root, filename)

        @self.app.route("/api/movies", methods=["GET"])
        def list_movies():
            return jsonify(entries_to_list(self.catalog_service.list_entries()))

        @self.app.route("/api/movies/<entry_id>", methods=["GET"])
        def get_movie(entry_id):
            parsed_id = self._parse_id(entry_id)
            entry = self.catalog_service.get_entry(parsed_id) if parsed_id is not None else None
            if entry is None:
                return jsonify({"success": False, "error": "Item not found"}), 404
            return jsonify(entry_to_dict(entry))

        @self.app.route("/api/movies", methods=["POST"])
        def create_movie():
            try:
                fields = {name: request.form.get(name) for name in FORM_FIELDS}
                parts = [
                    UploadedPart(field_name=name, filename=storage.filename or "", stream=storage.stream)
                    for name, storage in request.files.items(multi=True)
                ]
                result = self.catalog_service.create_entry(fields, parts)
            except HTTPException:
                raise
            except Exception as e:
                self.logger.error(f"Failed to handle upload: {e}")
                return jsonify({"success": False, "error": str(e)}), 500
            return self._result_response(result, include_item=True)

        @self.app.route("/api/movies/<entry_id>", methods=["DELETE"])
        def delete_movie(entry_id):
            parsed_id = self._parse_id(entry_id)
            if parsed_id is None:
                return jsonify({"success": False, "error": "Item not found"}), 404
            try:
                result = self.catalog_service.delete_entry(parsed_id)
            except Exception as e:
                return jsonify({"success": False, "error": str(e)}), 500
            return self._result_response(result)

        @self.app.route("/api/audit", methods=["GET"])
        def audit_assets():
            report = self.audit_service.audit()
            return jsonify(report.model_dump(mode="json"))

    @staticmethod
    def _parse_id(raw):
        try:
            return int(raw)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _result_response(result: OperationResult, include_item: bool = False):
        body = {"success": result.success}
        if include_item and result.item is not None:
            body["item"] = entry_to_dict(result.item)
        if result.error:
            body["error"] = result.error
        return jsonify(body), STATUS_CODES[result.status]

    def _setup_scheduler(self):
        self.scheduler.init_app(self.app)
        if self.config.audit_interval_minutes > 0:
            self.scheduler.add_job(
                id="asset_audit",
                func=self.audit_service.run_scheduled,
                trigger="interval",
                minutes=self.config.audit_interval_minutes,
            )

    def banner(self):
        port = self.config.server_port
        lines = [f"Media catalog running on http://localhost:{port}"]
        lines.extend(f"  LAN: http://{address}:{port}" for address in local_addresses())
        lines.append(f"  Catalog: {self.catalog_repo.catalog_file.path}")
        lines.append(f"  Uploads: {self.asset_store.uploads_dir}")
        return lines

    def run(self):
        self.scheduler.start()
        for line in self.banner():
            self.logger.info(line)
        self.app.run(host=self.config.server_host, port=self.config.server_port, threaded=True)


if __name__ == "__main__":
    server = Server()
    server.run()
