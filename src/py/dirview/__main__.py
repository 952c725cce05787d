import argparse
import sys

from . import config
from .config import Config, ConfigError
from .server import run
from .utils.logging import error, info


def parser() -> argparse.ArgumentParser:
	res = argparse.ArgumentParser(
		prog="dirview",
		description="Browse a directory over HTTP",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	res.add_argument(
		"-r",
		"--root",
		action="store",
		dest="root",
		help="Specifies the root directory to browse",
		default=config.ROOT,
	)
	res.add_argument(
		"-p",
		"--port",
		action="store",
		dest="port",
		type=int,
		help="Specifies the port",
		default=config.PORT,
	)
	res.add_argument(
		"-H",
		"--host",
		action="store",
		dest="host",
		help="Specifies the host to bind to",
		default=config.HOST,
	)
	return res


def main(args: list[str] | None = None) -> int:
	options = parser().parse_args(args=args)
	try:
		cfg = Config.Make(options.root, host=options.host, port=options.port)
	except ConfigError as e:
		error(str(e), "CONFIGERR")
		return 1
	info("Starting directory browser", Root=str(cfg.root), Port=cfg.port)
	run(cfg)
	return 0


if __name__ == "__main__":
	sys.exit(main(sys.argv[1:]))

# EOF
