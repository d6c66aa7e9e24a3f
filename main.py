from curve_composer.main import main

if __name__ == "__main__":
    main()
