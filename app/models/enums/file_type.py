# app/models/enums/file_type.py
import enum


class QualityCheckFileType(str, enum.Enum):
    pdf = "pdf"
    excel = "excel"
    image = "image"


class RfqFileType(str, enum.Enum):
    step = "step"
    pdf = "pdf"
    excel = "excel"
    image = "image"
