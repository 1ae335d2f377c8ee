"""Tree model: tasks, Center sentinel, document I/O and PDF attachments."""
from .model import CENTER_ID, Attachment, CenterNode, Task, TaskTree
from .document import SkillMap, load_map_file, save_map_file, attach_pdf
from .attachments import decode_data_url, encode_pdf, is_portable, read_pdf_as_data_url, scheme_of

__all__ = [
    "CENTER_ID",
    "Attachment",
    "CenterNode",
    "Task",
    "TaskTree",
    "SkillMap",
    "load_map_file",
    "save_map_file",
    "attach_pdf",
    "decode_data_url",
    "encode_pdf",
    "is_portable",
    "read_pdf_as_data_url",
    "scheme_of",
]
