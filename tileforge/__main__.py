from tileforge.app import run

run()
