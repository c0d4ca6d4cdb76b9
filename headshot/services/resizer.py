"""종횡비 유지 리사이즈"""

from PIL import Image


def fit_size(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """(max_width, max_height) 박스에 맞는 크기 계산 (순수 함수)

    확대/축소 모두 허용. 최소 1px.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"유효하지 않은 이미지 크기: {width}x{height}")
    ratio = min(max_width / width, max_height / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def scale_to_fit(image: Image.Image, max_width: int, max_height: int) -> Image.Image:
    """종횡비를 유지하며 박스에 맞게 Lanczos 리샘플링

    Returns:
        새 이미지 (원본은 변경하지 않음)
    """
    size = fit_size(image.width, image.height, max_width, max_height)
    return image.resize(size, Image.Resampling.LANCZOS)
