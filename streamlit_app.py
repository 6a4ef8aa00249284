"""
Streamlit entry point for the Problem Solver.

Browser form on top of `ProblemSolverWorkflow`: type a question, optionally
upload and crop a photo of the problem, and read the solution with rendered
math. Talks to the FastAPI service at ``API_BASE_URL``.
"""

from __future__ import annotations

import io
from typing import Tuple

import streamlit as st
from dotenv import load_dotenv
from loguru import logger
from PIL import Image, ImageDraw

from problem_solver.client.api_client import ProblemApiClient
from problem_solver.client.math_text import render_blocks, split_math_segments
from problem_solver.client.workflow import ProblemSolverWorkflow, WorkflowState
from problem_solver.core.config import settings
from problem_solver.services.image.cropper import CropRegion

load_dotenv()

PREVIEW_WIDTH = 600


@st.cache_resource(show_spinner=False)
def _get_api_client() -> ProblemApiClient:
    """Create one API client per Streamlit process."""
    return ProblemApiClient(base_url=settings.api_base_url)


def _get_workflow() -> ProblemSolverWorkflow:
    """Workflow state lives in the browser session."""
    if "workflow" not in st.session_state:
        st.session_state.workflow = ProblemSolverWorkflow(_get_api_client())
    return st.session_state.workflow


def _display_size(image_bytes: bytes) -> Tuple[int, int]:
    """Size the preview is shown at, width capped at PREVIEW_WIDTH."""
    with Image.open(io.BytesIO(image_bytes)) as image:
        width, height = image.size
    display_width = min(width, PREVIEW_WIDTH)
    return display_width, max(1, round(height * display_width / width))


def _render_notifications(workflow: ProblemSolverWorkflow) -> None:
    for index, notification in enumerate(list(workflow.notifications)):
        columns = st.columns([10, 1])
        with columns[0]:
            message = f"**{notification.title}:** {notification.description}"
            if notification.is_error:
                st.error(message)
            else:
                st.success(message)
        with columns[1]:
            if st.button("✕", key=f"dismiss_{index}_{id(notification)}"):
                workflow.dismiss_notification(index)
                st.rerun()


def _render_cropper(workflow: ProblemSolverWorkflow) -> None:
    """Crop step: percent sliders over the preview with the region outlined."""
    default = CropRegion.default()
    display_size = _display_size(workflow.selected_image)

    with st.container(border=True):
        st.subheader("Crop Image")
        left, right = st.columns(2)
        with left:
            x = st.slider("Left (%)", 0.0, 100.0, float(default.x))
            width = st.slider("Width (%)", 1.0, 100.0, float(default.width))
        with right:
            y = st.slider("Top (%)", 0.0, 100.0, float(default.y))
            height = st.slider("Height (%)", 1.0, 100.0, float(default.height))
        region = CropRegion(x=x, y=y, width=width, height=height, unit="%")

        with Image.open(io.BytesIO(workflow.selected_image)) as image:
            preview = image.convert("RGB").resize(display_size)
        box = region.scale_to_native(display_size, display_size)
        ImageDraw.Draw(preview).rectangle(box, outline=(255, 64, 64), width=3)
        st.image(preview, width=display_size[0])

        cancel, confirm = st.columns(2)
        if cancel.button("Cancel", use_container_width=True):
            workflow.cancel_crop()
            st.rerun()
        if confirm.button("Crop & Save", type="primary", use_container_width=True):
            with st.spinner("Solving..."):
                workflow.confirm_crop(region, display_size)
            st.rerun()


def _render_solution(workflow: ProblemSolverWorkflow) -> None:
    solution = (workflow.result or {}).get("solution")
    if not solution:
        return

    with st.container(border=True):
        st.subheader("Solution:")
        for kind, text in render_blocks(split_math_segments(solution.get("text", ""))):
            if kind == "latex":
                st.latex(text)
            else:
                st.markdown(text)


def main() -> None:
    st.set_page_config(page_title="Math & Science Problem Solver", layout="centered")
    st.title("Math & Science Problem Solver")
    st.caption("Get instant solutions to your math and science problems using AI")

    workflow = _get_workflow()
    _render_notifications(workflow)

    workflow.question = st.text_area(
        "Question",
        value=workflow.question,
        placeholder="Enter your math or science question here... "
                    "Use $...$ for inline math and $$...$$ for block math",
        height=120,
    )

    # A new widget key after each reset empties the uploader and lets the same file be picked again
    uploaded = st.file_uploader(
        "Upload Image",
        type=["png", "jpg", "jpeg", "gif", "bmp", "webp"],
        key=f"image_upload_{workflow.form_generation}",
    )
    if uploaded is not None:
        upload_key = (workflow.form_generation, uploaded.name, uploaded.size)
        if st.session_state.get("last_upload") != upload_key:
            st.session_state.last_upload = upload_key
            logger.info(f"Image selected: {uploaded.name} ({uploaded.size} bytes)")
            workflow.select_image(uploaded.getvalue(), uploaded.name)
            st.rerun()

    if workflow.state is WorkflowState.CROPPING and workflow.selected_image:
        _render_cropper(workflow)
    elif workflow.selected_image:
        st.image(workflow.selected_image, caption="Selected problem", width=_display_size(workflow.selected_image)[0])

    if st.button("Solve Problem", type="primary", disabled=workflow.state is WorkflowState.CROPPING):
        with st.spinner("Solving..."):
            workflow.submit()
        st.rerun()

    _render_solution(workflow)


main()
