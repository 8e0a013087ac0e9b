from filebox.main import run

run()
