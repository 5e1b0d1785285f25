"""Streamlit Application Runner

This module provides a Streamlit interface that runs the face overlay pipeline
over an uploaded video file and shows the annotated frames as they are
produced.
"""

import tempfile
import time
from pathlib import Path

import cv2
import streamlit as st

from facespotter.main import FaceSpotter, CaptureError
from facespotter.models.enums import CameraFacing


class StreamlitApp:
    """Streamlit application wrapper for the face overlay pipeline.

    Frames are processed in the Streamlit script thread; a Stop button sets
    a session flag that ends the loop on the next rerun.
    """

    def __init__(self):
        """Initialize the Streamlit app."""
        if 'running' not in st.session_state:
            st.session_state.running = False
        if 'video_path' not in st.session_state:
            st.session_state.video_path = None

    def _save_upload(self, video_file) -> str:
        suffix = Path(video_file.name).suffix or ".mp4"
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as handle:
            handle.write(video_file.read())
            return handle.name

    def process_video(self, video_path: str, mirror: bool):
        """Run the pipeline over a video file, updating the page per frame.

        Args:
            video_path: Path to video file
            mirror: Treat the video as front-camera footage and mirror it
        """
        facing = CameraFacing.FRONT if mirror else CameraFacing.REAR
        spotter = FaceSpotter(source=video_path, facing=facing)
        frame_slot = st.empty()
        status_slot = st.empty()

        try:
            spotter.open_source()
            while st.session_state.running:
                video_frame = spotter.read_frame()
                if video_frame is None:
                    break

                snapshots = spotter.process_frame(video_frame)
                canvas = spotter.render(video_frame)
                frame_slot.image(cv2.cvtColor(canvas, cv2.COLOR_BGR2RGB), use_container_width=True)

                rows = [
                    {
                        "face": s.face_id,
                        "drawn": s.is_renderable,
                        "left eye open": s.left_eye_open,
                        "right eye open": s.right_eye_open,
                        "smiling": s.smiling,
                    }
                    for s in snapshots
                ]
                status_slot.table(rows)
        except CaptureError as e:
            st.error(f"Could not open video: {e}")
        finally:
            spotter.shutdown()
            st.session_state.running = False

    def render(self):
        """Render the Streamlit interface."""
        st.set_page_config(
            page_title="FaceSpotter",
            page_icon="👀",
            layout="wide"
        )

        st.title("👀 FaceSpotter")
        st.markdown("---")

        with st.sidebar:
            st.header("Video Input")

            video_file = st.file_uploader(
                "Upload Video File",
                type=['mp4', 'avi', 'mov', 'mkv']
            )
            video_path = st.text_input(
                "Or enter video path",
                placeholder="/path/to/video.mp4"
            )
            mirror = st.checkbox("Front camera footage (mirror)", value=False)

            col1, col2 = st.columns(2)

            with col1:
                if st.button("▶️ Start", disabled=st.session_state.running):
                    if video_file:
                        st.session_state.video_path = self._save_upload(video_file)
                        st.session_state.running = True
                    elif video_path and Path(video_path).exists():
                        st.session_state.video_path = video_path
                        st.session_state.running = True
                    else:
                        st.error("Please provide a valid video file")

            with col2:
                if st.button("⏹️ Stop", disabled=not st.session_state.running):
                    st.session_state.running = False
                    st.info("Stopped")

            st.markdown("---")
            st.markdown("### Status")
            if st.session_state.running:
                st.success("🟢 Running")
            else:
                st.info("⚪ Stopped")

        if st.session_state.running and st.session_state.video_path:
            started = time.time()
            self.process_video(st.session_state.video_path, mirror)
            st.caption(f"Processed in {time.time() - started:.1f}s")
        else:
            st.info("👈 Upload a video file or provide a path to start")
            st.markdown("### How it works")
            st.markdown("""
            1. **Upload** a video with one or more faces
            2. **Click Start** to run face tracking
            3. **Watch** googly eyes, nose, mustache and hat follow each face
            """)


def main():
    """Main entry point for Streamlit app."""
    app = StreamlitApp()
    app.render()


if __name__ == "__main__":
    main()
