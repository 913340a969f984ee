import io

from carbon_intensity.publishers.console import ConsolePublisher


def test_console_publisher_writes_key_and_payload_to_stream():
    stream = io.StringIO()
    publisher = ConsolePublisher(separator=" | ", stream=stream)

    publisher.initialise()
    publisher.publish("X", '{"v":1}')
    publisher.publish("Y", "p2")
    publisher.close()

    assert stream.getvalue().splitlines() == ['X | {"v":1}', "Y | p2"]


def test_console_publisher_defaults_to_stdout(capsys):
    ConsolePublisher(separator=",").publish("DE", "p1")

    assert capsys.readouterr().out == "DE,p1\n"
