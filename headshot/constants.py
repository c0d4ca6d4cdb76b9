import re


class BatchId:
    PREFIX = "batch_"
    PATTERN = re.compile(r"^batch_[a-f0-9]{8}$")


class TTL:
    BATCH = 60 * 60 * 24  # 24시간
    CELERY_RESULT = 60 * 60 * 24


class RedisPrefix:
    BATCH = "batch"
    CANCEL = "cancel"


class Pipeline:
    """산출물 일치를 위해 고정된 처리 정책 값"""

    WORKING_MAX_SIZE = 4000  # 원본을 이 박스 안으로 맞춘 뒤 처리
    HEADROOM_OFFSET = 40  # 피사체 박스 위쪽 여백 (px)
    ZOOM_PASSES = 3
    ALPHA_THRESHOLD = 1  # alpha > 1 이면 전경
    OUTPUT_EXTENSION = "jpg"
    INPUT_EXTENSION = ".png"


class HaarParams:
    """정밀도보다 재현율 우선"""

    SCALE_FACTOR = 1.05
    MIN_NEIGHBORS = 3
    MIN_SIZE = (20, 20)
    CASCADE_FILENAME = "haarcascade_frontalface_default.xml"


class YuNetParams:
    MODEL_FILENAME = "face_detection_yunet_2023mar.onnx"
    NMS_THRESHOLD = 0.3


class Messages:
    NO_INPUT_FILES = "No PNG images found in the selected folder."
    PROCESSING = "({index}/{total}) Processing image..."
    COMPLETE = "Processing complete! ({total} images processed)"
    CANCELLED = "Processing cancelled ({processed}/{total} images processed)"
    MANUAL_CROP = "No face detected. Please crop this {name} image manually."


class Limits:
    BATCH_SOFT_TIME_LIMIT = 60 * 60  # 1시간
    BATCH_TIME_LIMIT = 60 * 65
