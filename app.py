import io
import time
import random

import streamlit as st
from PIL import Image, ImageDraw, ImageFont

from config import settings, get_model_path
from models.errors import DecodeError, DetectorError
from solvers.decoder import decode
from solvers.detector import YoloDetector

st.title(" Portal CAPTCHA Decode Dashboard")
st.write("Upload portal captcha images to see what the detector finds and what would be submitted.")

min_confidence = st.slider(
    "Class confidence threshold",
    min_value=0.0,
    max_value=1.0,
    value=settings.confidence_threshold,
    step=0.05,
)
expected_length = st.number_input(
    "Expected solution length",
    min_value=1,
    value=settings.expected_length,
)

uploaded_files = st.file_uploader(
    "📤 Upload CAPTCHA images",
    type=["png", "jpg", "jpeg"],
    accept_multiple_files=True
)


@st.cache_resource
def load_detector():
    """Load the model once per dashboard process."""
    return YoloDetector(
        get_model_path(),
        labels_path=settings.labels_file,
        detection_threshold=settings.detection_threshold,
        iou_threshold=settings.iou_threshold,
    )


def random_color():
    """Generate a random RGB color tuple."""
    return tuple(random.randint(50, 255) for _ in range(3))


def annotate(image, detections):
    annotated_image = image.convert("RGB")
    draw = ImageDraw.Draw(annotated_image)
    font = ImageFont.load_default()

    for det in detections:
        color = (0, 200, 0) if det.confidence >= min_confidence else random_color()
        x1, y1 = det.bbox.x, det.bbox.y
        x2, y2 = x1 + det.bbox.width, y1 + det.bbox.height
        draw.rectangle([x1, y1, x2, y2], outline=color, width=2)
        # Keep label inside image bounds
        draw.text((x1, max(0, y1 - 12)), f"{det.label} ({det.confidence:.2f})", fill=color, font=font)

    return annotated_image


def solve_and_get_data(image_bytes, image):
    start_time = time.time()
    detections = load_detector().detect(image_bytes)

    try:
        solution = decode(detections, min_confidence, int(expected_length))
        error = None
    except DecodeError as e:
        solution = None
        error = str(e)

    rows = [
        {
            "Label": det.label,
            "Confidence": f"{det.confidence:.3f}",
            "x": round(det.bbox.x, 1),
            "Kept": "yes" if det.confidence >= min_confidence else "no",
        }
        for det in sorted(detections, key=lambda d: d.bbox.x)
    ]

    return {
        "table": rows,
        "solution": solution,
        "error": error,
        "image": annotate(image, detections),
        "elapsed_time": time.time() - start_time,
    }


if uploaded_files:
    for uploaded_file in uploaded_files:
        image_bytes = uploaded_file.getvalue()
        image = Image.open(io.BytesIO(image_bytes))

        try:
            result_data = solve_and_get_data(image_bytes, image)
        except DetectorError as e:
            st.error(f"{uploaded_file.name}: {e}")
            continue

        col_img, col_res = st.columns([1, 1.5])

        with col_img:
            st.image(result_data["image"], caption=uploaded_file.name, use_container_width=True)
            st.markdown(
                f"<p style='color:green;'><b>Time Taken:</b> {result_data['elapsed_time']:.2f} seconds</p>",
                unsafe_allow_html=True
            )

        with col_res:
            st.markdown(f"### Results for {uploaded_file.name}")
            if result_data["solution"] is not None:
                st.success(f"Solution: {result_data['solution']}")
            else:
                st.warning(result_data["error"])
            st.table(result_data["table"])
            st.markdown("---")
