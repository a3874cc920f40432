"""GitHub 활동 내역으로 프로필 README를 갱신하는 CLI."""

__version__ = "0.1.0"
