"""
处理进度投影

由录音的两个标志位推导轮询进度，不保存任何状态。
"""

from recap.schemas import ProcessingStatus


def project_status(processed: bool, transcribed: bool) -> ProcessingStatus:
    if transcribed:
        return ProcessingStatus(progress=100, status="Completed")
    if processed:
        return ProcessingStatus(progress=75, status="Generating insights")
    return ProcessingStatus(progress=25, status="Transcribing audio")
