"""Colored console output shared by the installer steps"""

import sys


class Colors:
    """ANSI color codes for terminal output"""
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[0;34m'
    PURPLE = '\033[0;35m'
    CYAN = '\033[0;36m'
    RESET = '\033[0m'
    BOLD = '\033[1m'

    @staticmethod
    def info(msg: str):
        """Print blue info message"""
        print(f"{Colors.BLUE}ℹ️  {msg}{Colors.RESET}")

    @staticmethod
    def success(msg: str):
        """Print green success message"""
        print(f"{Colors.GREEN}✅ {msg}{Colors.RESET}")

    @staticmethod
    def warning(msg: str):
        """Print yellow warning message"""
        print(f"{Colors.YELLOW}⚠️  {msg}{Colors.RESET}")

    @staticmethod
    def error(msg: str):
        """Print red error message"""
        print(f"{Colors.RED}❌ {msg}{Colors.RESET}", file=sys.stderr)

    @staticmethod
    def header(msg: str):
        """Print purple section header"""
        print(f"{Colors.PURPLE}🎯 {msg}{Colors.RESET}")

    @staticmethod
    def step(msg: str):
        """Print cyan progress line"""
        print(f"{Colors.CYAN}🔄 {msg}{Colors.RESET}")
