"""JSON document persistence: codec.py (encode/decode) and state_file.py (file + debounced saver)."""
