from search_gateway.main import run

run()
