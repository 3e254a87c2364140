from authserver.main import run

run()
