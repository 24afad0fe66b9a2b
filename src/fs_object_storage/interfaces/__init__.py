from fs_object_storage.interfaces.file_system import FileSystem

__all__ = [
    "FileSystem",
]
