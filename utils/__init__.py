from utils.response_utils import parse_response_body, robust_parse_text  # noqa: F401
