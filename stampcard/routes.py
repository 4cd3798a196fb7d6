"""Stamp card Blueprint: the card page, reward claim, reset, and JSON helpers."""

from __future__ import annotations

from typing import Callable, Optional

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, session, url_for

from stampcard.catalog import StampCatalog
from stampcard.intake import Fetcher, build_share_url, handle_intake
from stampcard.persistence import ProgressPersistence
from stampcard.store import ProgressStore

CatalogProvider = Callable[[], StampCatalog]
FetcherProvider = Callable[[], Fetcher]

TRUTHY_VALUES = {"1", "true", "yes", "on"}


def create_stampcard_blueprint(
    catalog_provider: CatalogProvider,
    fetcher_provider: FetcherProvider,
    *,
    template_name: str = "stampcard/card.html",
    url_prefix: Optional[str] = None,
) -> Blueprint:
    """Factory so the app can inject how the catalog and motivation fetcher are built."""

    bp = Blueprint("stampcard", __name__, url_prefix=url_prefix)

    def _open_store(catalog: StampCatalog) -> ProgressStore:
        persistence = ProgressPersistence(session, catalog.total)
        return ProgressStore(
            catalog,
            progress=persistence.load_or_empty(),
            on_change=persistence.save,
        )

    def _wants_json() -> bool:
        accepts = request.accept_mimetypes
        return (
            request.is_json
            or request.headers.get("X-Requested-With") == "XMLHttpRequest"
            or accepts["application/json"] > accepts["text/html"]
        )

    def _card_url() -> str:
        return url_for(".view_card", _external=True)

    def _progress_payload(store: ProgressStore) -> dict:
        return {
            "status": "ok",
            "progress": store.progress.to_dict(),
            "total": store.total,
            "complete": store.is_complete(),
        }

    def _confirmed() -> bool:
        if request.is_json:
            payload = request.get_json(silent=True)
            raw = payload.get("confirm") if isinstance(payload, dict) else None
        else:
            raw = request.form.get("confirm")
        return str(raw).strip().lower() in TRUTHY_VALUES if raw is not None else False

    @bp.get("/")
    def view_card():
        catalog = catalog_provider()
        store = _open_store(catalog)
        result = handle_intake(store, request.url, request.args)

        base_url = _card_url()
        share_urls = {definition.index: build_share_url(base_url, definition.index) for definition in catalog}

        return render_template(
            template_name,
            catalog=catalog,
            progress=store.progress,
            total=store.total,
            complete=store.is_complete(),
            percent=store.progress.percent(store.total),
            last_added=result.added_id,
            clean_url=result.clean_url,
            share_urls=share_urls,
        )

    @bp.post("/claim")
    def claim_reward():
        json_mode = _wants_json()
        store = _open_store(catalog_provider())

        if store.claim_reward():
            current_app.logger.info("Stamp card reward claimed")
            if json_mode:
                return jsonify(_progress_payload(store))
            flash("恭喜完成！請向店員出示此畫面。", "success")
        else:
            msg = (
                "獎勵已經領取過了。"
                if store.progress.reward_claimed
                else f"請先集滿 {store.total} 枚印章再領取獎勵。"
            )
            if json_mode:
                return jsonify({"status": "error", "reason": msg}), 400
            flash(msg, "warning")

        return redirect(url_for(".view_card"))

    @bp.post("/reset")
    def reset_progress():
        json_mode = _wants_json()
        if not _confirmed():
            msg = "重置前請先確認。"
            if json_mode:
                return jsonify({"status": "error", "reason": msg}), 400
            flash(msg, "warning")
            return redirect(url_for(".view_card"))

        store = _open_store(catalog_provider())
        store.reset()
        current_app.logger.info("Stamp card progress reset")
        if json_mode:
            return jsonify(_progress_payload(store))
        flash("集章紀錄已重置。", "success")
        return redirect(url_for(".view_card"))

    @bp.get("/api/progress")
    def progress_json():
        store = _open_store(catalog_provider())
        return jsonify(_progress_payload(store))

    @bp.get("/api/motivation/<int:point>")
    def motivation_json(point: int):
        catalog = catalog_provider()
        if not catalog.contains(point):
            return jsonify({"status": "error", "reason": f"找不到第 {point} 號集章點。"}), 404
        motivation = fetcher_provider().fetch(point - 1, catalog.total)
        return jsonify({"status": "ok", "point": point, **motivation})

    @bp.get("/api/share/<int:point>")
    def share_url(point: int):
        catalog = catalog_provider()
        if not catalog.contains(point):
            return jsonify({"status": "error", "reason": f"找不到第 {point} 號集章點。"}), 404
        return jsonify(
            {
                "status": "ok",
                "point": point,
                "name": catalog.name_for(point),
                "url": build_share_url(_card_url(), point),
            }
        )

    return bp
