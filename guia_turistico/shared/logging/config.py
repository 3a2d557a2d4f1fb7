"""Configuração de logging"""
import logging
import sys

# Indica se o logging já foi configurado
_logger_configured = False


def setup_logging(level: str = "INFO", force: bool = False) -> None:
    """
    Configura o logging da aplicação

    Args:
        level: nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        force: reconfigura mesmo que o logging já tenha sido configurado
    """
    global _logger_configured

    if _logger_configured and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove handlers existentes
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Bibliotecas de terceiros ficam em WARNING
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    _logger_configured = True
    logging.info(f"Logging configured with level: {level}")


def get_logger(name: str) -> logging.Logger:
    """
    Obtém o logger com o nome informado

    Args:
        name: nome do logger (normalmente __name__)

    Returns:
        instância de logging.Logger
    """
    return logging.getLogger(name)
