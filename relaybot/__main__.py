"""
relaybot 的入口点，当作为模块运行时：python -m relaybot
"""

from relaybot.cli.commands import app

if __name__ == "__main__":
    app()
