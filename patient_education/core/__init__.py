"""GUI-agnostic core: catalog models, loading, editing and export."""
