from common.ids import generate_id
from common.jsonio import load_json, atomic_write_json, remove_json

__all__ = ["generate_id", "load_json", "atomic_write_json", "remove_json"]
