"""Interactive sample script served by the reference endpoint."""

name = input("What is your name? ")
print(f"Hello, {name}!")
total = 0
while True:
    line = input("Number to add (blank to finish): ")
    if not line.strip():
        break
    total += float(line)
    print(f"Running total: {total}")
print("Done.")
