"""Countdown builder (configuration page) route."""

from flask import Blueprint, render_template, request

from src.components.web import builder_handler

builder_bp = Blueprint('builder', __name__)


@builder_bp.route('/')
def countdown_builder():
    """Render the builder form with a live preview and the email snippet."""
    base_path = request.headers.get('X-Base-Path', '')
    base_url = f"{request.scheme}://{request.host}{base_path}"
    context = builder_handler.build_builder_context(request.args, base_url)
    return render_template('builder.html', **context)
