"""
Client-side services: storage access, state controller, filtering and folders
"""
from .storage_client import StorageClient, UploadResult
from .state_controller import AppStateController, ArchiveInput, ArchiveResult, Notice, ViewerDocument
from .filter_service import FilterCriteria, ExportPeriod, DateGroup, filter_files, group_by_date
from .folder_service import Folder, BulkDownloadResult, UNSORTED_FOLDER, derive_folders, files_in_folder

__all__ = [
    'StorageClient', 'UploadResult',
    'AppStateController', 'ArchiveInput', 'ArchiveResult', 'Notice', 'ViewerDocument',
    'FilterCriteria', 'ExportPeriod', 'DateGroup', 'filter_files', 'group_by_date',
    'Folder', 'BulkDownloadResult', 'UNSORTED_FOLDER', 'derive_folders', 'files_in_folder',
]
