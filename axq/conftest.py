import pytest

from axq.bridge import AXBridge
from axq.commands import Context, Options
from axq.memory import MemoryNode, MemoryProvider, RecordingActuator, RichText
from axq.provider import Rect

PID = 42


def build_finder():
    """Finder-like app tree.

    [0]          AXApplication "Finder"
    [0,0]        AXWindow "Documents" (#7)
    [0,0,0]        AXButton "OK" (ok-button)
    [0,0,1]        AXGroup
    [0,0,1,0]        AXStaticText "Hello World"
    [0,0,2]        AXTextField value "draft", description "Name"
    [0,0,3]        AXCheckBox "Remember" value 1
    [0,0,4]        AXOutline "Sidebar"
    [0,0,4,0]        AXRow -> AXStaticText "Recents"
    [0,0,4,1]        AXRow -> AXStaticText "Desktop", AXStaticText "Desktop"
    [0,1]        AXWindow "Downloads" (#8)
    [0,1,0]        AXButton "OK"
    [0,2]        AXMenuBar
    [0,2,0]        AXMenuBarItem "File" -> AXMenu: "New Window", "Settings…"
    [0,2,1]        AXMenuBarItem "Edit" -> AXMenu: "Copy"
    """
    ok = MemoryNode("AXButton", title="OK", identifier="ok-button", enabled=True,
                    frame=Rect(10, 10, 80, 20))
    hello = MemoryNode("AXStaticText", title="Hello World", actions=())
    group = MemoryNode("AXGroup", children=[hello], actions=())
    field = MemoryNode("AXTextField", value="draft", description="Name", enabled=True,
                       frame=Rect(10, 40, 200, 24))
    check = MemoryNode("AXCheckBox", title="Remember", value=1, enabled=False)
    rows = [
        MemoryNode("AXRow", selected=False, children=[MemoryNode("AXStaticText", value="Recents")]),
        MemoryNode("AXRow", selected=True, children=[
            MemoryNode("AXStaticText", value="Desktop"),
            MemoryNode("AXStaticText", value=" Desktop "),
        ]),
    ]
    outline = MemoryNode("AXOutline", title="Sidebar", children=rows, actions=())
    documents = MemoryNode("AXWindow", title="Documents", AXWindowNumber=7,
                           frame=Rect(0, 0, 800, 600),
                           children=[ok, group, field, check, outline])
    downloads = MemoryNode("AXWindow", title="Downloads", AXWindowNumber=8,
                           frame=Rect(900, 0, 400, 300),
                           children=[MemoryNode("AXButton", title="OK")])

    file_menu = MemoryNode("AXMenu", children=[
        MemoryNode("AXMenuItem", title="New Window"),
        MemoryNode("AXMenuItem", title="Settings…"),
    ])
    edit_menu = MemoryNode("AXMenu", children=[MemoryNode("AXMenuItem", title="Copy")])
    menu_bar = MemoryNode("AXMenuBar", children=[
        MemoryNode("AXMenuBarItem", title="File", children=[file_menu]),
        MemoryNode("AXMenuBarItem", title="Edit", children=[edit_menu]),
    ])
    return MemoryNode("AXApplication", title="Finder",
                      children=[documents, downloads, menu_bar], actions=())


def build_status_bar():
    """System-wide element whose menu bar holds two status items.

    Battery has no menu until it is pressed.
    """
    wifi = MemoryNode("AXMenuBarItem", description="Wi-Fi, connected", frame=Rect(1200, 0, 30, 22))
    battery = MemoryNode("AXMenuBarItem", title="Battery", frame=Rect(1240, 0, 30, 22))

    def open_menu(node, action):
        if not any(c.attributes.get("AXRole") == "AXMenu" for c in node.children):
            node.add(MemoryNode("AXMenu", children=[
                MemoryNode("AXMenuItem", title="Battery Settings…"),
            ]))

    battery.on_action = open_menu
    clock = MemoryNode("AXStaticText", value="9:41", actions=())
    bar = MemoryNode("AXMenuBar", children=[wifi, battery, clock])
    return MemoryNode("AXSystemWide", children=[bar], actions=())


@pytest.fixture
def finder():
    return build_finder()


@pytest.fixture
def provider(finder):
    p = MemoryProvider(system=build_status_bar())
    p.add_app(PID, finder, name="Finder", bundle_id="com.apple.finder", frontmost=True)
    p.add_app(77, MemoryNode("AXApplication", title="Notes"), name="Notes",
              bundle_id="com.apple.Notes")
    return p


@pytest.fixture
def bridge(provider):
    return AXBridge(provider)


@pytest.fixture
def actuator():
    return RecordingActuator()


@pytest.fixture
def ctx(provider, actuator):
    return Context(provider, actuator, Options())


@pytest.fixture
def rich_node():
    return MemoryNode("AXTextArea", value=RichText("styled body"))
