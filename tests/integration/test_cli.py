"""
Tests for the command-line entry point.
"""

import socket

import pytest

from exserver import __version__
from exserver.__main__ import main, build_parser, config_from_args


class TestArguments:
    """Tests for argument parsing."""
    
    def test_defaults(self):
        config = config_from_args(build_parser().parse_args([]))
        
        assert config.port == "8080"
        assert config.host is None
        assert config.resource_path == "misc/index.html"
        assert config.debug is False
        assert config.log_level == "INFO"
    
    def test_server_options(self):
        args = build_parser().parse_args([
            "--port", "3000", "--host", "127.0.0.1", "--resource", "page.html", "--cache",
        ])
        config = config_from_args(args)
        
        assert config.port == "3000"
        assert config.host == "127.0.0.1"
        assert config.resource_path == "page.html"
        assert config.cache_resource is True
    
    def test_debug_enables_checks_and_logging(self):
        config = config_from_args(build_parser().parse_args(["--debug"]))
        
        assert config.debug is True
        assert config.log_level == "DEBUG"
    
    def test_verbose_enables_debug_logging_only(self):
        config = config_from_args(build_parser().parse_args(["--verbose"]))
        
        assert config.debug is False
        assert config.log_level == "DEBUG"
    
    def test_no_threads_option(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--threads", "4"])
        
        assert exc_info.value.code == 2


class TestExitStatus:
    """Tests for main() exit codes."""
    
    def test_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        
        assert exc_info.value.code == 0
        assert "--port" in capsys.readouterr().out
    
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip() == f"Version {__version__}"
    
    def test_invalid_port(self, capsys):
        assert main(["--port", "not-a-port"]) == 1
        assert "Invalid port" in capsys.readouterr().err
    
    def test_bind_failure(self, free_port, resource_file, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
            holder.bind(("127.0.0.1", free_port))
            holder.listen(1)
            
            status = main([
                "--host", "127.0.0.1",
                "--port", str(free_port),
                "--resource", str(resource_file),
            ])
        
        assert status == 1
        assert "bind() failed" in capsys.readouterr().err
